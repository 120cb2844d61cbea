# paintquote/services/quote_numbers.py
import os
import logging
from datetime import datetime

import pytz

from paintquote.models import Quote

logger = logging.getLogger(__name__)

# Quote numbers and proposal dates follow the contractor's local calendar
SERVER_TIMEZONE = pytz.timezone(os.environ.get('TIMEZONE', 'America/Los_Angeles'))

MONTH_CODES = {
    1: "JA", 2: "FB", 3: "MR", 4: "AP", 5: "MY", 6: "JU",
    7: "JL", 8: "AG", 9: "SP", 10: "OT", 11: "NV", 12: "DC"
}


def local_now():
    return datetime.now(pytz.utc).astimezone(SERVER_TIMEZONE)


def generate_quote_number(today=None):
    """Quote number from the local month code, a running count for the month and the year, e.g. Q-OT12-26"""
    today = today or local_now().date()
    month_code = MONTH_CODES[today.month]
    prefix = f"Q-{month_code}"
    suffix = f"-{str(today.year)[2:]}"

    # Numbers are unique across tenants; count every quote numbered this month
    month_count = Quote.query.filter(
        Quote.quote_number.like(f"{prefix}%{suffix}")
    ).count()

    sequence = month_count + 1
    quote_number = f"{prefix}{sequence}{suffix}"
    while Quote.query.filter_by(quote_number=quote_number).first() is not None:
        sequence += 1
        quote_number = f"{prefix}{sequence}{suffix}"

    logger.debug(f"Generated quote number {quote_number}")
    return quote_number
