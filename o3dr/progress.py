from o3dr.models import RequestOutcome, SearchSucceeded


def format_progress(elapsed_sec: float, check_index: int) -> str:
    return f"[progress] still researching... {elapsed_sec:.0f}s elapsed (check #{check_index})"


def format_outcome(outcome: RequestOutcome) -> str:
    if isinstance(outcome, SearchSucceeded):
        return outcome.text
    return f"Error: {outcome.message}"
