"""
Monthly timeline aggregation feeding the timeline insight.

Processed clients are grouped by UTC calendar month. Each month reports its
meetings, closed deals, conversion rate (one decimal place), dominant sentiment
and up to three top industries with their own dominant sentiment. Months are
returned in chronological order.
"""

from collections import Counter
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping

from backend.models import MonthlyTimelineBucket, Sentiment, TimelineIndustry
from backend.services.metrics import as_utc, conversion_rate, dominant_value


TIMELINE_DECIMAL_PLACES = 1
TOP_MONTH_INDUSTRIES = 3
DEFAULT_SENTIMENT = Sentiment.NEUTRAL.value


def month_key(moment: datetime) -> str:
    """YYYY-MM of the UTC month."""
    return as_utc(moment).strftime('%Y-%m')


def format_month_label(key: str) -> str:
    """'2024-01' -> 'January 2024'."""
    return datetime.strptime(key, '%Y-%m').strftime('%B %Y')


def build_monthly_timeline(rows: Iterable[Mapping[str, Any]]) -> List[MonthlyTimelineBucket]:
    """
    Aggregate processed rows (meetingDate, closed, industry, sentiment) by month.

    Returns an empty list for empty input.
    """
    months: Dict[str, Dict[str, Any]] = {}

    for row in rows:
        key = month_key(row['meetingDate'])
        month = months.setdefault(key, {
            'total': 0,
            'closed': 0,
            'sentiments': [],
            'industries': {},
        })
        month['total'] += 1
        if row.get('closed'):
            month['closed'] += 1

        sentiment = row.get('sentiment')
        if sentiment:
            month['sentiments'].append(sentiment)

        industry = row.get('industry')
        if industry:
            entry = month['industries'].setdefault(industry, {'count': 0, 'sentiments': []})
            entry['count'] += 1
            if sentiment:
                entry['sentiments'].append(sentiment)

    buckets = []
    for key in sorted(months):
        month = months[key]
        industry_counts = Counter({name: entry['count'] for name, entry in month['industries'].items()})
        top_industries = [
            TimelineIndustry(
                industry=name,
                count=count,
                sentiment=dominant_value(month['industries'][name]['sentiments'], DEFAULT_SENTIMENT),
            )
            for name, count in industry_counts.most_common(TOP_MONTH_INDUSTRIES)
        ]

        buckets.append(MonthlyTimelineBucket(
            monthKey=key,
            month=format_month_label(key),
            totalMeetings=month['total'],
            totalClosed=month['closed'],
            conversionRate=conversion_rate(month['closed'], month['total'], TIMELINE_DECIMAL_PLACES),
            avgSentiment=dominant_value(month['sentiments'], DEFAULT_SENTIMENT),
            topIndustries=top_industries,
        ))

    return buckets
