"""Project slug utilities."""
import re


def slugify(text: str) -> str:
    """
    Convert a project name to a URL-safe slug.

    Examples:
        >>> slugify("Client Work")
        'client-work'
        >>> slugify("  Q3 Audit: Phase #2 ")
        'q3-audit-phase-2'
    """
    slug = text.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-") or "project"


async def generate_unique_slug(collection, base_slug: str, user_id: str) -> str:
    """
    Return ``base_slug`` or the first free ``base_slug-N`` for this user.

    Examples:
        With "client-work" taken, returns "client-work-2"
    """
    candidate = base_slug
    suffix = 2
    while await collection.find_one({"user_id": user_id, "slug": candidate}):
        candidate = f"{base_slug}-{suffix}"
        suffix += 1
    return candidate
