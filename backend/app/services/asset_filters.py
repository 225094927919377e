from typing import Iterable, List, Optional


def filter_assets(
    assets: Iterable[dict],
    search: Optional[str] = None,
    category: Optional[str] = None,
    department: Optional[str] = None,
) -> List[dict]:
    """Search over name/category/department, then exact category/department match."""
    needle = (search or "").strip().lower()

    out = []
    for a in assets:
        if needle and not any(
            needle in str(a.get(field) or "").lower()
            for field in ("name", "category", "department")
        ):
            continue
        if category and a.get("category") != category:
            continue
        if department and a.get("department") != department:
            continue
        out.append(a)
    return out
