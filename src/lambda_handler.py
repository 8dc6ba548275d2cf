"""AWS Lambda handler for API Gateway requests.

Requests are passed to the FastAPI application through the Mangum ASGI
adapter. Anything that is not an API Gateway request is rejected.
"""

import logging
import os
from typing import Any

from mangum import Mangum

from lambda_dependencies import get_fastapi_app, initialize_lambda_environment

# Initialize Lambda environment during cold start (skip in test mode)
if os.getenv("ENVIRONMENT") != "test":
    initialize_lambda_environment()

logger = logging.getLogger(__name__)

# Cached for warm starts; not built in test mode
if os.getenv("ENVIRONMENT") != "test":
    app = get_fastapi_app()
    mangum_handler = Mangum(app, lifespan="off")
else:
    app = None  # type: ignore
    mangum_handler = None  # type: ignore


def is_api_gateway_event(event: dict[str, Any]) -> bool:
    """Determine if the event is an API Gateway (REST or HTTP API) request.

    Args:
        event: The Lambda event payload

    Returns:
        True if this is an API Gateway request, False otherwise
    """
    return "requestContext" in event and ("httpMethod" in event or "rawPath" in event)


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda entry point.

    Args:
        event: The Lambda event payload
        context: The Lambda context object

    Returns:
        Response dict with statusCode and body
    """
    logger.info(f"Received Lambda invocation, request_id: {context.request_id}")

    if not is_api_gateway_event(event):
        logger.warning("Rejected non API Gateway event")
        return {
            "statusCode": 400,
            "body": "Unsupported event type",
        }

    try:
        result: dict[str, Any] = mangum_handler(event, context)
        return result
    except Exception as e:
        logger.exception(f"Unhandled error in Lambda handler: {e}")
        return {
            "statusCode": 500,
            "body": f"Internal server error: {str(e)}",
        }
