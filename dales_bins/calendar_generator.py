import logging
from icalendar import Calendar, Event, Alarm
from datetime import datetime, timedelta
from .data_models import CollectionsResult

logger = logging.getLogger(__name__)

ICS_FILENAME = 'bin_collections.ics'


def generate_calendar_object(result: CollectionsResult) -> Calendar:
    """
    Generates an icalendar.Calendar object with one all-day event per collection.
    """
    cal = Calendar()
    cal.add('prodid', '-//Bin Calendar//Derbyshire Dales//EN')
    cal.add('version', '2.0')

    logger.debug(f"Generating Calendar object for {len(result.collections)} collections for {result.address}")

    for collection in result.collections:
        bin_type = collection.bin_type.value
        try:
            collection_date = datetime.strptime(collection.date, "%Y-%m-%d").date()
        except ValueError as e:
            logger.warning(f"Skipping collection with invalid date {collection.date}: {e}")
            continue

        event = Event()
        event.add('summary', f"{bin_type} bin collection")
        event.add('description', f"Bin collection day for: {bin_type}.\n{result.note}")
        event.add('uid', f"{collection.date}-{bin_type.lower()}-{result.uprn or result.postcode.replace(' ', '')}@dales-bins")
        # All-Day Event
        event.add('dtstart', collection_date)
        # Mark as Free Time
        event.add('transp', 'TRANSPARENT')
        event.add('location', result.address)

        # Reminder (Alarm) at 7:30 PM day before
        alarm = Alarm()
        alarm.add('action', 'DISPLAY')
        alarm.add('description', f"Put out {bin_type} bin tomorrow")
        alarm.add('trigger', timedelta(hours=-4.5)) # 4.5 hours before midnight
        event.add_component(alarm)

        cal.add_component(event)

    return cal


def create_ics_file(result: CollectionsResult, filename: str = ICS_FILENAME):
    """
    Generates and saves an .ics file for a CollectionsResult.
    """
    cal = generate_calendar_object(result)
    try:
        with open(filename, 'wb') as f:
            f.write(cal.to_ical())
        logger.info(f"Calendar file '{filename}' generated successfully.")
    except IOError as e:
        logger.error(f"Error writing ICS file {filename}: {e}", exc_info=True)
