LIKE_ESCAPE = "\\"

def escape_like(term: str) -> str:
    """Escape LIKE wildcards so ``term`` matches literally"""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
