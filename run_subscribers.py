from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.auth import require_admin
from core.logger import setup_logger
from database.repository import SubscriberRepo

logger = setup_logger("SVC_SUBSCRIBERS")
router = APIRouter(prefix="/api/subscribers", tags=["subscribers"])

subscriber_repo = SubscriberRepo()


class EmailBody(BaseModel):
    email: Optional[str] = None


@router.post("/subscribe")
async def subscribe(body: EmailBody):
    if not body.email:
        return JSONResponse({"error": "Email is required"}, status_code=400)

    try:
        subscriber, status = await subscriber_repo.subscribe(body.email)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    if status == SubscriberRepo.ALREADY_SUBSCRIBED:
        return {"message": "You are already subscribed!", "alreadySubscribed": True}
    if status == SubscriberRepo.REACTIVATED:
        logger.info(f"Subscriber reactivated: {subscriber.email}")
        return {"message": "Welcome back! Your subscription has been reactivated.", "reactivated": True}

    logger.info(f"New subscriber: {subscriber.email}")
    return JSONResponse(
        {
            "message": "Successfully subscribed! You will receive updates about new content.",
            "subscriber": {
                "email": subscriber.email,
                "subscribed_at": subscriber.subscribed_at.isoformat(),
            },
        },
        status_code=201,
    )


@router.post("/unsubscribe")
async def unsubscribe(body: EmailBody):
    if not body.email:
        return JSONResponse({"error": "Email is required"}, status_code=400)

    try:
        subscriber = await subscriber_repo.unsubscribe(body.email)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    if not subscriber:
        return JSONResponse({"error": "Email not found in subscribers list"}, status_code=404)
    return {"message": "Successfully unsubscribed"}


@router.get("", dependencies=[Depends(require_admin)])
async def list_subscribers():
    subscribers = await subscriber_repo.list_all()
    return {
        "total": len(subscribers),
        "active": sum(1 for s in subscribers if s.is_active),
        "subscribers": [s.to_dict() for s in subscribers],
    }


@router.get("/stats", dependencies=[Depends(require_admin)])
async def subscriber_stats():
    stats = await subscriber_repo.get_stats()
    return {
        "total": stats["total"],
        "active": stats["active"],
        "inactive": stats["inactive"],
        "recentSubscribers": [s.to_dict() for s in stats["recent"]],
    }


@router.delete("/{subscriber_id}", dependencies=[Depends(require_admin)])
async def delete_subscriber(subscriber_id: int):
    deleted = await subscriber_repo.delete_by_id(subscriber_id)
    if not deleted:
        return JSONResponse({"error": "Subscriber not found"}, status_code=404)
    return {"message": "Subscriber deleted successfully"}
