import logging
import sys
import argparse
import json
import os
from dotenv import load_dotenv

from dales_bins.data_fetchers.fetcher_factory import create_fetcher
from dales_bins.calendar_generator import create_ics_file
from dales_bins.data_models import CollectionsResult

project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv()
DEFAULT_POSTCODE = os.environ.get("MY_POSTCODE")
DEFAULT_SOURCE = os.environ.get("FETCHER_SOURCE", "derbyshire_dales")
LOG_FILE = os.path.join(project_root, 'error.log')
log_configured = False
if not log_configured: # Simplified logging setup
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(name)s - %(message)s', filename=LOG_FILE, filemode='a')
    console_handler = logging.StreamHandler(sys.stderr); console_handler.setLevel(logging.INFO)
    formatter = logging.Formatter('%(levelname)s: %(message)s'); console_handler.setFormatter(formatter)
    logging.getLogger('').addHandler(console_handler)
    log_configured = True
logger = logging.getLogger(__name__)

def main(argv=None):
    parser = argparse.ArgumentParser(description="Check Derbyshire Dales bin collection schedule.")
    parser.add_argument("--postcode", "-p", help="Postcode (Defaults to MY_POSTCODE env var).")
    parser.add_argument("--save-ics", "-i", action="store_true", help="Save schedule to ICS file.")
    parser.add_argument("--ics-file", default="bin_collections.ics", help="ICS output filename.")
    parser.add_argument("--source", default=DEFAULT_SOURCE, help="Data source.")
    args = parser.parse_args(argv)

    postcode = args.postcode if args.postcode else DEFAULT_POSTCODE
    if not postcode: print("Error: Postcode required.", file=sys.stderr); sys.exit(1)

    logger.info(f"Checking bins for postcode '{postcode}' using source '{args.source}'")
    try:
        fetcher = create_fetcher(source=args.source)
    except ValueError as e:
        logger.error(f"Fetcher creation failed: {e}", exc_info=True); print(f"ERROR: {e}", file=sys.stderr); sys.exit(1)

    try:
        result: CollectionsResult = fetcher.get_collections(postcode)
    except Exception as e:
        logger.error(f"Unexpected error during fetch: {e}", exc_info=True)
        print(f"\nUnexpected error. Check {LOG_FILE}.", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result.to_dict(), indent=4))
    if not result.is_live:
        logger.warning(f"Showing placeholder collections: {result.note}")

    if args.save_ics:
        if result.is_live:
            logger.info("Saving schedule to ICS file...")
            create_ics_file(result, args.ics_file)
        else:
            logger.info("Skipping ICS file generation (no live collection dates).")

    logger.info("Check complete.")


if __name__ == "__main__":
    main()
