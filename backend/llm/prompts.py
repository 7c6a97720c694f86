"""
Prompt builders for AI insights and transcript categorization.

Each builder turns an aggregated summary into a single user prompt. Builders
are pure functions so they can be tested without the API.
"""

from collections import Counter
from typing import Any, List, Mapping, Sequence

from backend.models import (
    DimensionValue,
    MonthlyTimelineBucket,
    PainPoint,
    Sentiment,
    VolumeVsConversion,
)


# =============================================================================
# CONSTANTS
# =============================================================================

TOP_PAIN_POINTS_IN_PROMPT = 5
TOP_INDUSTRIES_IN_PROMPT = 5
TOP_MOTIVATIONS_IN_PROMPT = 5
RECENT_MONTHS = 4
RELIABLE_INDUSTRY_MIN_CLIENTS = 3

PERCEPTION_SAMPLE_SIZE = 10
SOLUTIONS_SAMPLE_SIZE = 15
PERCEPTION_TRUNCATE = 500
SOLUTIONS_TRUNCATE = 400

_ONE_PARAGRAPH_RULES = (
    "Be specific and concrete. Return ONLY the insight text, no bullet points "
    "or formatting. Be professional and actionable."
)


def truncate(text: str, limit: int) -> str:
    """Cut text to limit characters, appending '...' when shortened."""
    return text[:limit] + ('...' if len(text) > limit else '')


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _signed(value: float, suffix: str = '%') -> str:
    return f"{'+' if value >= 0 else ''}{value:.1f}{suffix}"


def _percent_change(recent: float, previous: float) -> float:
    if not previous:
        return 0.0
    return (recent - previous) / previous * 100


# =============================================================================
# Analytics Insights
# =============================================================================

def build_pain_points_prompt(pain_points: Sequence[PainPoint]) -> str:
    top = list(pain_points[:TOP_PAIN_POINTS_IN_PROMPT])
    total_mentions = sum(item.count for item in pain_points)
    average_rate = _mean([item.conversionRate for item in pain_points])
    first = top[0] if top else None

    lines = "\n".join(
        f"{index}. {item.painPoint}: {item.count} mentions, {item.conversionRate:.1f}% conversion rate"
        for index, item in enumerate(top, start=1)
    )

    return f"""You are a business analyst. Analyze these client pain points and provide a brief, actionable insight (2-3 sentences maximum). Be SPECIFIC and mention actual pain point names and numbers.

Top Pain Points Summary:
{lines}

Overall Statistics:
- Total unique pain points: {len(pain_points)}
- Total mentions: {total_mentions}
- Average conversion rate: {average_rate:.1f}%

IMPORTANT: Your insight MUST include:
1. Name the most common pain point (e.g., "{first.painPoint if first else 'N/A'}" with {first.count if first else 0} mentions)
2. Mention 2-3 specific pain points from the top list with their mention counts
3. Include actual numbers (mention counts and conversion rates)
4. Provide one actionable recommendation based on the most critical pain points

{_ONE_PARAGRAPH_RULES}"""


def build_volume_prompt(volume_data: Sequence[VolumeVsConversion]) -> str:
    """Only ranges with at least one client are described; callers ensure one exists."""
    valid = [item for item in volume_data if item.count > 0]
    total_clients = sum(item.count for item in valid)
    best = max(valid, key=lambda item: item.conversionRate)
    most_common = max(valid, key=lambda item: item.count)
    average_rate = _mean([item.conversionRate for item in valid])

    def share(item: VolumeVsConversion) -> float:
        return item.count / total_clients * 100

    lines = "\n".join(
        f"{index}. Volume {item.volumeRange}: {item.count} clients ({share(item):.1f}% of total), "
        f"{item.conversionRate:.1f}% conversion rate"
        for index, item in enumerate(valid, start=1)
    )

    return f"""You are a business analyst. Analyze this volume vs conversion data and provide a brief, actionable insight (2-3 sentences maximum). Be SPECIFIC and mention actual volume ranges, conversion rates, client counts, and numbers.

Volume vs Conversion Summary:
{lines}

Overall Statistics:
- Total clients analyzed: {total_clients}
- Average conversion rate: {average_rate:.1f}%
- Highest conversion rate: {best.volumeRange} range with {best.conversionRate:.1f}% ({best.count} clients)
- Most common volume range: {most_common.volumeRange} with {most_common.count} clients ({share(most_common):.1f}% of total) and {most_common.conversionRate:.1f}% conversion rate

IMPORTANT: Your insight MUST include:
1. Identify the volume range with the highest conversion rate and how many clients it represents
2. Analyze the relationship between where clients are concentrated and which ranges convert best
3. Mention specific client counts AND conversion rates for the most common and the highest converting ranges
4. Provide one actionable recommendation that considers both the current distribution and the conversion potential

{_ONE_PARAGRAPH_RULES}"""


def build_timeline_prompt(months: Sequence[MonthlyTimelineBucket], product_name: str) -> str:
    """Compares the last four months with the months before them."""
    recent = list(months[-RECENT_MONTHS:])
    previous = list(months[:-RECENT_MONTHS])

    recent_meetings = _mean([m.totalMeetings for m in recent])
    recent_closed = _mean([m.totalClosed for m in recent])
    recent_rate = _mean([m.conversionRate for m in recent])
    previous_meetings = _mean([m.totalMeetings for m in previous]) if previous else recent_meetings
    previous_closed = _mean([m.totalClosed for m in previous]) if previous else recent_closed
    previous_rate = _mean([m.conversionRate for m in previous]) if previous else recent_rate

    blocks = []
    for month in recent:
        lines = [
            f"{month.month}:",
            f"- Total Meetings: {month.totalMeetings}",
            f"- Total Closed: {month.totalClosed}",
            f"- Conversion Rate: {month.conversionRate:.1f}%",
            f"- Average Sentiment: {month.avgSentiment}",
        ]
        if month.topIndustries:
            industries = ", ".join(
                f"{item.industry} ({item.count} clients, {item.sentiment} sentiment)"
                for item in month.topIndustries
            )
            lines.append(f"- Top Industries: {industries}")
        blocks.append("\n".join(lines))
    months_text = "\n---\n".join(blocks)

    return f"""You are a business analyst for {product_name}. Analyze these recent sales timeline trends and provide structured insights. Focus on RECENT CHANGES and CURRENT TRENDS. Be SPECIFIC about which months show changes and possible reasons.

Recent Months Data ({len(recent)} most recent months):
{months_text}

Trend Analysis:
- Meetings: {_signed(_percent_change(recent_meetings, previous_meetings))} change (recent avg: {recent_meetings:.1f} vs previous: {previous_meetings:.1f})
- Closures: {_signed(_percent_change(recent_closed, previous_closed))} change (recent avg: {recent_closed:.1f} vs previous: {previous_closed:.1f})
- Conversion Rate: {_signed(recent_rate - previous_rate, ' points')} change (recent avg: {recent_rate:.1f}% vs previous: {previous_rate:.1f}%)

Return your response as a JSON object with exactly these keys:
- "keyFindings": Array of 2-3 key findings (1-2 sentences each, specific about months and numbers)
- "reasons": Array of 2-3 possible reasons for the changes (mention industries or sentiment patterns)
- "recommendations": Array of 2-3 actionable recommendations (focus on what to do NOW)

Return ONLY valid JSON, no additional text, no markdown formatting. Example format:
{{
  "keyFindings": ["Finding 1 with specific months/numbers", "Finding 2"],
  "reasons": ["Reason 1", "Reason 2"],
  "recommendations": ["Recommendation 1", "Recommendation 2"]
}}"""


# =============================================================================
# Client Insights
# =============================================================================

def build_perception_prompt(transcripts: Sequence[Mapping[str, Any]], product_name: str) -> str:
    """transcripts: mappings with transcription, closed and sentiment."""
    total = len(transcripts)
    closed = sum(1 for item in transcripts if item.get('closed'))
    sentiments = Counter(item.get('sentiment') for item in transcripts)
    sample = transcripts[:PERCEPTION_SAMPLE_SIZE]

    samples = "\n---\n".join(
        f"Transcript {index} ({'CLOSED' if item.get('closed') else 'NOT CLOSED'}, "
        f"Sentiment: {item.get('sentiment') or 'unknown'}):\n"
        f"{truncate(item['transcription'], PERCEPTION_TRUNCATE)}"
        for index, item in enumerate(sample, start=1)
    )

    return f"""You are a business analyst for {product_name}. Analyze these client meeting transcripts to understand how clients perceive {product_name}.

Client Statistics:
- Total clients analyzed: {total}
- Closed deals: {closed} ({(closed / total * 100 if total else 0):.1f}%)
- Sentiment distribution: {sentiments[Sentiment.POSITIVE.value]} positive, {sentiments[Sentiment.NEUTRAL.value]} neutral, {sentiments[Sentiment.SKEPTICAL.value]} skeptical

Sample Transcripts ({len(sample)} of {total}):
{samples}

Analyze these transcripts and provide insights for each of the following aspects. Be SPECIFIC and mention actual themes, patterns, or feedback from the transcripts. Each insight should be 2-3 sentences.

Return your response as a JSON object with exactly these keys:
- "positiveAspects": What do clients appreciate or value? What strengths are mentioned?
- "concerns": What concerns, doubts, or objections do clients express? (If none, say "No significant concerns or objections were identified.")
- "successFactors": What patterns distinguish clients who closed deals from those who didn't?
- "recommendations": What should the sales team focus on or improve based on client feedback?

Return ONLY valid JSON, no additional text, no markdown formatting. Example format:
{{
  "positiveAspects": "Clients appreciate...",
  "concerns": "Some clients express concerns about...",
  "successFactors": "Closed deals are associated with...",
  "recommendations": "The sales team should focus on..."
}}"""


def build_solutions_prompt(transcripts: Sequence[Mapping[str, Any]], product_name: str) -> str:
    """transcripts: mappings with transcription, closed, mainMotivation and technicalRequirements."""
    total = len(transcripts)
    closed = sum(1 for item in transcripts if item.get('closed'))
    sample = transcripts[:SOLUTIONS_SAMPLE_SIZE]

    motivations = Counter(item.get('mainMotivation') for item in transcripts if item.get('mainMotivation'))
    requirements = Counter(
        requirement
        for item in transcripts
        for requirement in (item.get('technicalRequirements') or [])
    )

    motivation_lines = "\n".join(
        f"{name}: {count} clients" for name, count in motivations.most_common(TOP_MOTIVATIONS_IN_PROMPT)
    ) or 'No specific motivations identified'
    requirement_lines = "\n".join(
        f"{name}: {count} mentions" for name, count in requirements.most_common(TOP_MOTIVATIONS_IN_PROMPT)
    ) or 'No specific technical requirements identified'

    samples = "\n---\n".join(
        f"Transcript {index} ({'CLOSED' if item.get('closed') else 'NOT CLOSED'}):\n"
        f"{truncate(item['transcription'], SOLUTIONS_TRUNCATE)}"
        for index, item in enumerate(sample, start=1)
    )

    return f"""You are a business analyst for {product_name}. Analyze these client meeting transcripts to identify the MAIN SOLUTIONS and needs that clients are seeking.

Client Statistics:
- Total clients analyzed: {total}
- Closed deals: {closed} ({(closed / total * 100 if total else 0):.1f}%)

Top Motivations (why clients seek {product_name}):
{motivation_lines}

Top Technical Requirements:
{requirement_lines}

Sample Transcripts ({len(sample)} of {total}):
{samples}

Based on these transcripts, identify the MAIN SOLUTIONS that clients are seeking. Focus on:
1. What problems are they trying to solve?
2. What capabilities or features are they most interested in?
3. What outcomes are they hoping to achieve?

Provide a brief, actionable insight (2-3 sentences maximum) that names the 2-3 most common needs, relates them to motivations and technical requirements, and gives one recommendation for the sales team.

{_ONE_PARAGRAPH_RULES}"""


# =============================================================================
# Industry Insights
# =============================================================================

def build_industry_distribution_prompt(industries: Sequence[DimensionValue]) -> str:
    ordered = sorted(industries, key=lambda item: item.count, reverse=True)
    top = ordered[:TOP_INDUSTRIES_IN_PROMPT]
    total_clients = sum(item.count for item in industries)
    single_client = sum(1 for item in industries if item.count == 1)
    reliable = sum(1 for item in industries if item.count >= RELIABLE_INDUSTRY_MIN_CLIENTS)
    first = top[0] if top else None

    lines = "\n".join(f"{index}. {item.value}: {item.count} clients" for index, item in enumerate(top, start=1))

    return f"""You are a business analyst. Analyze this industry distribution data and provide a brief, actionable insight (2-3 sentences maximum). Be SPECIFIC and mention actual industry names and numbers.

Industry Distribution Summary:
- Total industries: {len(industries)}
- Total clients: {total_clients}
- Industries with only 1 client: {single_client}
- Industries with 3+ clients: {reliable}

Top {len(top)} Industries by Volume:
{lines}

IMPORTANT: Your insight MUST include:
1. Name the industry with the most clients (e.g., "{first.value if first else 'N/A'}" with {first.count if first else 0} clients)
2. Mention specific industries from the top list with their client counts
3. Focus on VOLUME and DISTRIBUTION - do NOT mention conversion rates
4. Provide one actionable recommendation based on market concentration

{_ONE_PARAGRAPH_RULES}"""


def build_industry_conversion_prompt(industries: Sequence[DimensionValue]) -> str:
    """Only industries with at least three clients are considered; callers ensure one exists."""
    reliable = [item for item in industries if item.count >= RELIABLE_INDUSTRY_MIN_CLIENTS]
    by_rate = sorted(reliable, key=lambda item: item.conversionRate, reverse=True)
    top = by_rate[:3]
    bottom = list(reversed(by_rate[-3:]))
    average_rate = _mean([item.conversionRate for item in reliable])

    def describe(rows: List[DimensionValue]) -> str:
        return "\n".join(
            f"{index}. {item.value}: {item.conversionRate:.1f}% ({item.closed}/{item.count} clients)"
            for index, item in enumerate(rows, start=1)
        )

    return f"""You are a business analyst. Analyze this industry conversion rate data and provide a brief, actionable insight (2-3 sentences maximum). Be SPECIFIC and mention actual industry names and conversion rates.

Conversion Rate Analysis:
- Total industries analyzed: {len(reliable)} (with at least {RELIABLE_INDUSTRY_MIN_CLIENTS} clients)
- Average conversion rate: {average_rate:.1f}%

Top 3 Industries by Conversion Rate:
{describe(top)}

Bottom 3 Industries by Conversion Rate:
{describe(bottom)}

IMPORTANT: Your insight MUST include:
1. Name the industry with the highest conversion rate ({top[0].value} at {top[0].conversionRate:.1f}%)
2. Mention specific industries and their conversion rates
3. Highlight opportunities or concerns (high conversion but low volume, or low conversion needing attention)
4. Provide one actionable recommendation

{_ONE_PARAGRAPH_RULES}"""


# =============================================================================
# Categorization
# =============================================================================

def build_categorization_prompt(
    transcription: str,
    client_name: str,
    closed: bool,
    product_name: str,
) -> str:
    return f"""You are an expert sales analyst. Analyze the following sales meeting transcription and extract key dimensions in JSON format.

Client Name: {client_name}
Deal Status: {'CLOSED (Won)' if closed else 'NOT CLOSED (Lost/Ongoing)'}

Transcription:
\"\"\"
{transcription}
\"\"\"

Extract and return ONLY a valid JSON object with the following fields (no additional text or explanation):

{{
  "industry": "The business sector/industry (e.g., financial services, e-commerce, healthcare, education, logistics, consulting, technology)",
  "operationSize": "small | medium | large (based on interaction volume: <100=small, 100-250=medium, >250=large)",
  "interactionVolume": number (approximate weekly interactions mentioned in transcription),
  "discoverySource": "How they discovered {product_name} (e.g., conference, recommendation, Google search, LinkedIn, event, article)",
  "mainMotivation": "Primary motivation for seeking {product_name} (e.g., efficiency, scalability, personalization, integration, automation, cost reduction)",
  "urgencyLevel": "immediate | planned | exploratory (based on tone and context)",
  "painPoints": ["List of specific problems mentioned", "e.g., high workload, slow response times, repetitive queries"],
  "technicalRequirements": ["Technical needs mentioned", "e.g., multi-language support, integration with CRM, data confidentiality"],
  "sentiment": "positive | neutral | skeptical (overall tone of the prospect)"
}}

IMPORTANT: Return ONLY the JSON object, nothing else."""
