import json
import os
import logging
import base64
import sys
from dataclasses import replace
from typing import Dict, Any, Optional

from dales_bins.data_fetchers.fetcher_factory import create_fetcher
from dales_bins.data_fetchers.base_fetcher import BinDataFetcher
from dales_bins.calendar_generator import generate_calendar_object
from dales_bins.data_models import CollectionsResult


# --- Basic Lambda Logging Setup ---
log_level_str = os.environ.get('LOG_LEVEL', 'INFO').upper()
log_level = getattr(logging, log_level_str, logging.INFO)
logger = logging.getLogger(__name__)
if not logging.getLogger().hasHandlers():
     logging.basicConfig(level=log_level, stream=sys.stdout, format='%(levelname)s:%(name)s: %(message)s')
else: logger.setLevel(log_level)

# Reused across warm invocations so the address and collection caches survive
_fetcher: Optional[BinDataFetcher] = None


def get_fetcher() -> BinDataFetcher:
    global _fetcher
    if _fetcher is None:
        _fetcher = create_fetcher(source=os.environ.get("FETCHER_SOURCE", "derbyshire_dales"))
    return _fetcher


# --- Helper Functions ---
def create_error_response(status_code: int, error: str, message: str) -> Dict[str, Any]:
    logger.error(f"Returning error {status_code}: {message}")
    return {"statusCode": status_code, "headers": {"Content-Type": "application/json"}, "body": json.dumps({"error": error, "message": message}), "isBase64Encoded": False}

def create_json_response(result: CollectionsResult) -> Dict[str, Any]:
    return {"statusCode": 200, "headers": {"Content-Type": "application/json"}, "body": json.dumps(result.to_dict()), "isBase64Encoded": False}

def create_ics_response(result: CollectionsResult) -> Dict[str, Any]:
    ics_content_bytes = generate_calendar_object(result).to_ical()
    encoded_body = base64.b64encode(ics_content_bytes).decode('utf-8')
    return {"statusCode": 200, "headers": {"Content-Type": "text/calendar", "Content-Disposition": 'attachment; filename="bin_collections.ics"'}, "body": encoded_body, "isBase64Encoded": True}


# --- Lambda Handler: GET /api/collections?postcode=DE4 3NN ---
def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    handler_logger = logging.getLogger(f"{__name__}.lambda_handler")
    handler_logger.info(f"Received event: {json.dumps(event)}")

    # 1. Parse input with priority: query string > path parameters > environment variables
    query = event.get("queryStringParameters") or {}
    path_params = event.get("pathParameters") or {}
    postcode = query.get("postcode") or path_params.get("postcode") or os.environ.get("MY_POSTCODE")
    if not postcode:
        return create_error_response(400, "missing_postcode", "Missing required query parameter: postcode")
    response_format = (query.get("format") or "json").lower()

    # 2. Get collections; the fetcher degrades rather than raising on upstream failures
    try: fetcher = get_fetcher()
    except ValueError as e: return create_error_response(400, "invalid_configuration", f"Invalid configuration: {e}")
    try:
        result = fetcher.get_collections(postcode)
    except Exception as e:
        handler_logger.exception("Error fetching collections")
        return create_error_response(500, "adapter_error", str(e))

    handler_logger.info(f"Returning {len(result.collections)} collections for {result.postcode}: {result.note}")

    # 3. Format response
    if response_format == "ics":
        if not result.is_live:
            # Placeholder dates must not land in a subscriber's calendar
            handler_logger.warning(f"No live data for {result.postcode}, returning an empty calendar: {result.note}")
            result = replace(result, collections=[])
        try:
            return create_ics_response(result)
        except Exception:
            handler_logger.exception("Error generating ICS calendar")
            return create_error_response(500, "calendar_error", "Internal server error preparing calendar data.")
    return create_json_response(result)


# Example local test block
if __name__ == '__main__':
    import argparse
    parser = argparse.ArgumentParser(description='Test Lambda handler with optional command line parameters')
    parser.add_argument('--postcode', help='Postcode for testing')
    parser.add_argument('--format', default='json', choices=['json', 'ics'])
    args = parser.parse_args()

    test_event = {"queryStringParameters": {"postcode": args.postcode or os.environ.get("MY_POSTCODE"), "format": args.format}}
    logger.info(f"Using test event: {json.dumps(test_event)}")
    response = lambda_handler(test_event, None)
    if response.get("isBase64Encoded") and len(response.get("body", "")) > 100:
        response = dict(response, body=response["body"][:100] + "... (truncated)")
    logger.info(json.dumps(response, indent=2))
