"""JSON export for suite structure and run summaries."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import asdict
from typing import Any

from specsuite.models import InfoEntry, Scope, Summary, TestEntry
from specsuite.suite import Suite


def _node_to_json(node: Scope | TestEntry | InfoEntry) -> dict[str, Any]:
    if isinstance(node, Scope):
        return {
            "type": "scope",
            "name": node.name,
            "kind": node.kind,
            "child_prefix": node.child_prefix,
            "children": [_node_to_json(child) for child in node.children],
        }
    if isinstance(node, TestEntry):
        return {
            "type": "test",
            "name": node.name,
            "text": node.spec_text,
            "tags": sorted(node.tags),
            "ignored": node.ignored,
            "pending": node.body is None,
        }
    return {"type": "info", "message": node.message}


def suite_to_json(suite: Suite) -> dict[str, Any]:
    """Describe a suite's registered tests, its tree and its nested suites."""
    trunk = suite.engine.trunk
    return {
        "suite": suite.suite_name,
        "class": suite.suite_class,
        "tests": suite.test_names,
        "tags": {name: sorted(tags) for name, tags in suite.tags.items()},
        "expected_test_count": suite.expected_test_count(),
        "tree": [_node_to_json(child) for child in trunk.children],
        "nested_suites": [suite_to_json(nested) for nested in suite.nested_suites],
    }


def summary_to_json(summary: Summary) -> dict[str, Any]:
    data = asdict(summary)
    data["total"] = summary.total
    data["success"] = summary.success
    return data


def export_json(suites: Sequence[Suite], indent: int = 2) -> str:
    """Export the structure of ``suites`` as a JSON string."""
    return json.dumps([suite_to_json(s) for s in suites], indent=indent)
