"""Text rendering for covered call analysis results."""

from typing import List

from ..models.covered_call import CoveredCallCandidate
from ..models.results import AnalysisResult, BulkAnalysisResult


def render_candidates(candidates: List[CoveredCallCandidate]) -> str:
    """One tab-indented ``strike,mark,break_even,assignment_gain`` line per candidate."""
    return "\n".join("\t" + candidate.render() for candidate in candidates)


def render_analysis(result: AnalysisResult) -> str:
    """Render a single-expiration analysis the way the CLI shows it."""
    return (
        "\nExpiration Dates: "
        + ",".join(d.strftime('%Y-%m-%d') for d in result.expiration_dates_flat)
        + "\n"
        + f"Share Price: ${result.quote.last_price}, Ex Date: {result.expiration_date}\n"
        + render_candidates(result.options_chain)
    )


def print_analysis(result: AnalysisResult):
    print(result.display_text)


def print_bulk_analysis(result: BulkAnalysisResult):
    """Print one block per expiration page.

    Args:
        result: BulkAnalysisResult to display
    """
    print("\n" + "=" * 80)
    print(f"  COVERED CALLS - {result.quote.ticker}")
    print(f"  Share Price: ${result.quote.last_price:.2f}")
    print("=" * 80)

    for expiration, page in zip(result.page_dates, result.pages):
        print(f"\nEx Date: {expiration} ({len(page)} candidates)")
        print("-" * 80)
        if page:
            print(render_candidates(page))
        else:
            print("No candidates found.")


def print_market_status(is_open: bool, next_open: str | None = None):
    if is_open:
        print("Market is open.")
    else:
        print(f"Market is closed. Next open: {next_open}")


def candidates_to_records(candidates: List[CoveredCallCandidate]) -> List[dict]:
    """Flatten candidates into table rows (unset fields stay None)."""
    return [
        {
            'Strike': c.strike,
            'Mark': c.mark,
            'Break Even': c.break_even,
            'Assignment Gain': c.assignment_gain,
            'Gain %': c.assignment_gain_percent,
            'Hours': c.time,
            'Risk': c.risk,
            'Gain/Day': c.time_gain,
            'Gain %/Day': c.time_gain_percent,
            'ITM': c.itm,
        }
        for c in candidates
    ]
