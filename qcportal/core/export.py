"""
CSV export of serialized rows (discrepancies, clarifications, projects).
"""
import csv
import re
from datetime import date, datetime

from django.http import HttpResponse
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

DEFAULT_DATE_FIELDS = ('createdAt', 'dateRaised', 'dateReported')


def field_header(field):
    """'createdAt' -> 'Created At'"""
    spaced = re.sub(r'([A-Z])', r' \1', field)
    return spaced[:1].upper() + spaced[1:]


def _as_date(value):
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value)
    parsed = parse_datetime(text)
    if parsed is not None:
        return parsed.date()
    return parse_date(text[:10])


def filter_for_export(rows, include_fields, date_range=None, filters=None, date_fields=DEFAULT_DATE_FIELDS):
    """
    Filter rows and keep only include_fields.

    date_range is a (start, end) pair of dates, either end may be None; a row
    is kept when the first of date_fields it carries falls inside the range
    (inclusive). Rows without any of those dates are dropped when a range is
    given. filters maps field -> value and keeps rows with equal values
    (compared as strings).
    """
    result = list(rows)

    if date_range and any(date_range):
        start, end = date_range
        kept = []
        for row in result:
            row_date = None
            for field in date_fields:
                row_date = _as_date(row.get(field))
                if row_date is not None:
                    break
            if row_date is None:
                continue
            if start and row_date < start:
                continue
            if end and row_date > end:
                continue
            kept.append(row)
        result = kept

    for key, value in (filters or {}).items():
        result = [row for row in result if str(row.get(key)) == str(value)]

    return [{field: row.get(field) for field in include_fields} for row in result]


def export_csv(rows, include_fields, filename_prefix='export'):
    """Write rows as a CSV attachment named <prefix>_YYYY-MM-DD_HH-MM.csv"""
    stamp = timezone.localtime().strftime('%Y-%m-%d_%H-%M')
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{filename_prefix}_{stamp}.csv"'

    writer = csv.writer(response)
    writer.writerow([field_header(field) for field in include_fields])
    for row in rows:
        writer.writerow(['' if row.get(field) is None else row.get(field) for field in include_fields])
    return response


def export_params(request, default_fields):
    """
    Read export options from the query string.

    fields=a,b,c (defaults to default_fields), start/end (YYYY-MM-DD), and
    any other parameter as an exact-match filter.
    """
    params = request.query_params
    fields_param = params.get('fields')
    include_fields = [f.strip() for f in fields_param.split(',') if f.strip()] if fields_param else list(default_fields)
    start = parse_date(params['start']) if params.get('start') else None
    end = parse_date(params['end']) if params.get('end') else None
    filters = {
        key: value for key, value in params.items()
        if key not in ('fields', 'start', 'end', 'format')
    }
    return include_fields, (start, end), filters
