"""
Slugs for published loadouts.

``"Red Dragon Loadout"`` becomes ``red-dragon-loadout``; when that is taken the
next free suffix is used (``-2``, ``-3``, ...). The suffix is always one more
than the highest suffix in use, so it never goes back to a gap.
"""
from __future__ import annotations

import re

from loadouts.models import Loadout

MAX_SLUG_LENGTH = 100
FALLBACK_SLUG = 'loadout'

# Path segments under /loadouts/ that are pages, not loadouts
RESERVED_SLUGS = {'new'}

_NON_ALNUM = re.compile(r'[^a-z0-9]+')


def slugify_name(name: str) -> str:
    slug = _NON_ALNUM.sub('-', (name or '').lower()).strip('-')
    slug = slug[:MAX_SLUG_LENGTH].strip('-')
    return slug or FALLBACK_SLUG


def find_available_slug(base: str, exclude_pk=None) -> str:
    pattern = re.compile(rf'^{re.escape(base)}(?:-(\d+))?$')
    taken = Loadout.objects.filter(slug__startswith=base)
    if exclude_pk is not None:
        taken = taken.exclude(pk=exclude_pk)

    base_taken = base in RESERVED_SLUGS
    highest = 1
    for slug in taken.values_list('slug', flat=True):
        match = pattern.match(slug)
        if not match:
            continue
        if match.group(1):
            highest = max(highest, int(match.group(1)))
        else:
            base_taken = True

    if not base_taken:
        return base
    return f"{base}-{highest + 1}"


def generate_slug(name: str, exclude_pk=None) -> str:
    return find_available_slug(slugify_name(name), exclude_pk=exclude_pk)
