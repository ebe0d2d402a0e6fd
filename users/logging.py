import logging

logger = logging.getLogger("manicvanity.auth")


def log_auth_event(action: str, request, *, user=None, outcome: str = "success", **fields) -> None:
    """Log a sign-in or token event; failed outcomes are warnings."""
    event = f"auth.{action}"
    extra = {"event": event, "outcome": outcome, "ip": request.META.get("REMOTE_ADDR"), **fields}
    if user is not None:
        extra["user_id"] = user.id
    logger.log(logging.INFO if outcome == "success" else logging.WARNING, event, extra=extra)
