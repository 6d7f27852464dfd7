from fastapi import status

from estrategia_enem.core.config import settings
from estrategia_enem.core.response import error_response


def plan_limit_error(
    *,
    message: str,
    activity: str,
    current_plan: str,
    metric: str,
    limit: int,
    used: int | None = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
):
    """Return a standardized quota-exceeded error response.

    Payload shape:
    {
      error: message,
      error_code: "QUOTA_EXCEEDED",
      data: {
        activity,             # chat | essay
        current_plan,         # free
        upgrade_url,          # where the client sends the user to upgrade
        limit: {
          metric,             # daily_chat_questions, monthly_essay_corrections
          limit,
          used?,
        }
      }
    }
    """
    limit_obj: dict[str, int | str] = {"metric": metric, "limit": limit}
    if used is not None:
        limit_obj["used"] = used

    return error_response(
        msg=message,
        data={
            "activity": activity,
            "current_plan": current_plan,
            "upgrade_url": settings.UPGRADE_URL,
            "limit": limit_obj,
        },
        status_code=status_code,
        error_code="QUOTA_EXCEEDED",
    )
