from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from townlink.db import session_scope
from townlink.metrics import collect_metrics


def main() -> None:
    with session_scope() as session:
        metrics = collect_metrics(session)
    print(json.dumps(metrics, indent=2, default=str))


if __name__ == "__main__":
    main()
