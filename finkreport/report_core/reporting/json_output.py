"""JSON output formatting."""
from __future__ import annotations

import json

from finkreport.report_core.models import AggregateResult


def print_json_output(result: AggregateResult) -> None:
    """Print the aggregated tree and category map as JSON."""
    print(json.dumps(result.to_dict(), indent=2))
