"""Newsletter subscription endpoints."""
from fastapi import APIRouter, Depends, HTTPException
from auto_blogger.email.sender import send_subscription_emails
from auto_blogger.web.schemas import SubscribeRequest
from auto_blogger.web.services import Services, get_services
from auto_blogger.logging_cfg.logger import setup_logger

logger = setup_logger()

router = APIRouter(prefix='/api/subscription', tags=['subscription'])


@router.post('/subscribe')
def subscribe(body: SubscribeRequest, services: Services = Depends(get_services)):
    email = (body.email or '').strip().lower()
    if not email or '@' not in email:
        raise HTTPException(status_code=400, detail='Please provide a valid email address')

    if not services.subscribers.add(email):
        raise HTTPException(status_code=400, detail='Email already subscribed')

    email_sent = True
    try:
        send_subscription_emails(email, services.subscribers.count())
    except Exception as e:
        # The subscription is stored either way
        logger.error(f"Subscription email failed for {email}: {str(e)}")
        email_sent = False

    return {
        'success': True,
        'message': 'Successfully subscribed! Check your email for confirmation.',
        'email_sent': email_sent
    }


@router.get('/count')
def subscriber_count(services: Services = Depends(get_services)):
    return {'count': services.subscribers.count()}
