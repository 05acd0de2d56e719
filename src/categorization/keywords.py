"""Rule-based categorizer used when no LLM is configured."""

from __future__ import annotations

from src.pipeline_config import DEFAULT_DEPARTMENT, Department

DEPARTMENT_KEYWORDS: dict[Department, tuple[str, ...]] = {
    Department.DESIGN: (
        "design", "label", "packaging", "brand", "visual", "creative",
        "artwork", "graphics", "layout", "ui", "ux", "appearance",
    ),
    Department.PROCUREMENT: (
        "costing", "cost", "procurement", "purchase", "buying", "sourcing",
        "supplier", "vendor", "price", "budget", "commercial", "negotiation",
    ),
    Department.PRODUCTION: (
        "production", "manufacturing", "formulation", "processing",
        "quality", "testing", "assembly", "operations", "factory",
    ),
}


def categorize_by_keywords(task: str) -> Department:
    """Pick the department whose keywords appear most often in ``task``.

    Ties go to the department listed first; no match falls back to Production.
    """
    text = task.lower()
    best, best_score = DEFAULT_DEPARTMENT, 0
    for department, keywords in DEPARTMENT_KEYWORDS.items():
        score = sum(1 for keyword in keywords if keyword in text)
        if score > best_score:
            best, best_score = department, score
    return best


class KeywordCategorizer:
    name = "keywords"

    async def categorize(self, tasks: list[str]) -> list[dict[str, str]]:
        return [{"task": task, "department": categorize_by_keywords(task).value} for task in tasks]
