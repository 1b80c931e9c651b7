"""Scheduler status and manual/external triggers. Triggered runs happen after the response is sent."""
from fastapi import APIRouter, BackgroundTasks, Depends
from auto_blogger.web.services import Services, get_services
from auto_blogger.logging_cfg.logger import setup_logger

logger = setup_logger()

router = APIRouter(prefix='/api', tags=['scheduler'])


@router.get('/scheduler/status')
def scheduler_status(services: Services = Depends(get_services)):
    return services.scheduler.get_status()


@router.post('/scheduler/run-weekly')
def run_weekly(background_tasks: BackgroundTasks, services: Services = Depends(get_services)):
    background_tasks.add_task(services.scheduler.run_weekly_generation)
    return {'success': True, 'message': 'Weekly blog generation started'}


@router.post('/scheduler/run-trending')
def run_trending(background_tasks: BackgroundTasks, services: Services = Depends(get_services)):
    background_tasks.add_task(services.scheduler.run_trending_generation)
    return {'success': True, 'message': 'Trending blog generation started'}


@router.post('/scheduler/run-cleanup')
def run_cleanup(background_tasks: BackgroundTasks, services: Services = Depends(get_services)):
    background_tasks.add_task(services.scheduler.run_manual_cleanup)
    return {'success': True, 'message': 'Blog cleanup started'}


@router.get('/cron/weekly')
def cron_weekly(background_tasks: BackgroundTasks, services: Services = Depends(get_services)):
    logger.info("External weekly cron trigger received")
    background_tasks.add_task(services.scheduler.run_weekly_generation)
    return {'success': True, 'message': 'Weekly blog generation triggered'}


@router.get('/cron/daily')
def cron_daily(background_tasks: BackgroundTasks, services: Services = Depends(get_services)):
    logger.info("External daily cron trigger received")
    background_tasks.add_task(services.scheduler.run_trending_generation)
    return {'success': True, 'message': 'Daily blog generation triggered'}


@router.get('/cron/cleanup')
def cron_cleanup(background_tasks: BackgroundTasks, services: Services = Depends(get_services)):
    logger.info("External cleanup cron trigger received")
    background_tasks.add_task(services.scheduler.run_manual_cleanup)
    return {'success': True, 'message': 'Cleanup triggered'}
