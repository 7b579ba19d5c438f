"""Fragment index: library icons cut into classified, searchable fragments.

The index is built once per library and then shared read-only between
planning calls. Keys follow one scheme:

- raw fragment name: ``"arrow-head"``
- ``tag:<t>``, ``category:<c>``, ``source:<icon name>``
- ``geometric:<type>``, only for fragments with a non-complex type
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Iterator, Mapping, Sequence

from iconsmith.cache import AnalysisCache
from iconsmith.errors import MalformedPathError, MissingExternalDataWarning
from iconsmith.kitbash.collaborators import FragmentClassifier
from iconsmith.models.fragment import (
    ElementKind,
    FragmentClassification,
    GeometricType,
    LibraryIcon,
    ShapeFragment,
)
from iconsmith.models.geometry import BoundingBox
from iconsmith.svg.bbox import bounding_box_of
from iconsmith.svg.elements import SvgElement, find_drawables
from iconsmith.svg.serializer import build_tag
from iconsmith.svg.transform import compose_transforms, transform_box

logger = logging.getLogger(__name__)

_PREFIXES = ("tag:", "category:", "geometric:", "source:")

_ELEMENT_KINDS = {
    "path": ElementKind.PATH,
    "circle": ElementKind.CIRCLE,
    "rect": ElementKind.RECT,
    "line": ElementKind.LINE,
    "ellipse": ElementKind.PATH,
    "polyline": ElementKind.PATH,
    "polygon": ElementKind.PATH,
}

# |aspect - 1| below this makes a <rect> a square
_SQUARE_TOLERANCE = 0.2


class FragmentIndex(Mapping[str, list[ShapeFragment]]):
    """Read-only mapping of classification key → fragments."""

    def __init__(self, entries: Mapping[str, Sequence[ShapeFragment]] | None = None, library_id: str = "") -> None:
        self.library_id = library_id
        self._entries: dict[str, tuple[ShapeFragment, ...]] = {
            key: tuple(fragments) for key, fragments in (entries or {}).items()
        }

    def __getitem__(self, key: str) -> list[ShapeFragment]:
        return list(self._entries[key])

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def fragments(self) -> list[ShapeFragment]:
        """Every distinct fragment, in insertion order."""
        seen: dict[str, ShapeFragment] = {}
        for fragments in self._entries.values():
            for fragment in fragments:
                seen.setdefault(fragment.id, fragment)
        return list(seen.values())

    def by_geometry(self, geometric_type: GeometricType | str) -> list[ShapeFragment]:
        return self.get(f"geometric:{GeometricType.parse(geometric_type).value}", [])

    def by_category(self, category: str) -> list[ShapeFragment]:
        return self.get(f"category:{category.lower()}", [])

    def by_source(self, icon_name: str) -> list[ShapeFragment]:
        return self.get(f"source:{icon_name.lower()}", [])

    def search(self, query: str) -> list[ShapeFragment]:
        """Name, tag, geometric and source lookup; partial name match as a last resort."""
        q = query.strip().lower()
        results: list[ShapeFragment] = []
        results.extend(self.get(q, []))
        results.extend(self.get(f"tag:{q}", []))
        for prefix in ("geometric:", "source:"):
            key = q if q.startswith(prefix) else f"{prefix}{q}"
            results.extend(self.get(key, []))

        if not results and q:
            for key, fragments in self._entries.items():
                if q in key and not key.startswith(_PREFIXES):
                    results.extend(fragments)

        unique: dict[str, ShapeFragment] = {}
        for fragment in results:
            unique.setdefault(fragment.id, fragment)
        return list(unique.values())


def infer_geometric_type(element: SvgElement, box: BoundingBox) -> GeometricType:
    """Shape type from the element kind alone, used when no classifier answered."""
    name = element.name.lower()
    if name == "circle":
        return GeometricType.CIRCLE
    if name == "line":
        return GeometricType.LINE
    if name == "rect":
        if box.height > 0 and abs(box.aspect_ratio - 1.0) < _SQUARE_TOLERANCE:
            return GeometricType.SQUARE
        return GeometricType.RECT
    return GeometricType.COMPLEX


def _raw_markup(element: SvgElement) -> str:
    tag = element.source_tag if element.self_closing else build_tag(element.name, element.attrs)
    inherited = [a.transform for a in element.ancestors if a.transform]
    if inherited:
        # Carry group transforms so the fragment draws where its box says it does
        return f'<g transform="{" ".join(inherited)}">{tag}</g>'
    return tag


class FragmentIndexBuilder:
    """Cuts library icons into fragments and builds one index per library.

    Construction is serialized per library id; finished indexes are kept in
    the injected cache until the caller invalidates them.
    """

    def __init__(self, cache: AnalysisCache | None = None, canvas_size: float = 24.0) -> None:
        self.cache = cache or AnalysisCache("fragment-index")
        self.canvas_size = canvas_size
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, library_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(library_id, threading.Lock())

    @staticmethod
    def cache_key(library_id: str) -> str:
        return f"index:{library_id}"

    def build(
        self,
        library_id: str,
        icons: Sequence[LibraryIcon],
        classifications: Mapping[str, FragmentClassification] | None = None,
    ) -> FragmentIndex:
        """Index for ``library_id``, built at most once until invalidated.

        ``classifications`` maps fragment id (``"<icon id>#<n>"``) to what
        the external classifier said; anything missing is inferred.
        """
        key = self.cache_key(library_id)
        with self._lock_for(library_id):
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Reusing fragment index for %s", library_id)
                return cached
            index = self._build(library_id, icons, classifications or {})
            self.cache.set(key, index)
            return index

    def invalidate(self, library_id: str) -> bool:
        return self.cache.delete(self.cache_key(library_id))

    def _build(
        self,
        library_id: str,
        icons: Sequence[LibraryIcon],
        classifications: Mapping[str, FragmentClassification],
    ) -> FragmentIndex:
        entries: dict[str, list[ShapeFragment]] = {}
        total = 0
        for icon in icons:
            for fragment in self.fragments_of(icon, classifications):
                total += 1
                for key in _keys_for(fragment, icon):
                    entries.setdefault(key, []).append(fragment)

        logger.info(
            "Indexed %d icon(s) of %s into %d fragment(s), %d key(s)",
            len(icons),
            library_id,
            total,
            len(entries),
        )
        return FragmentIndex(entries, library_id=library_id)

    def fragments_of(
        self,
        icon: LibraryIcon,
        classifications: Mapping[str, FragmentClassification] | None = None,
    ) -> list[ShapeFragment]:
        """Snapshot every drawing element of one icon as a fragment."""
        classifications = classifications or {}
        canvas_area = self.canvas_size * self.canvas_size
        fragments: list[ShapeFragment] = []

        for i, element in enumerate(find_drawables(icon.svg)):
            kind = _ELEMENT_KINDS.get(element.name.lower())
            if kind is None:
                continue
            try:
                box = bounding_box_of(element, self.canvas_size)
            except MalformedPathError as e:
                logger.warning("Skipping malformed fragment %s#%d: %s", icon.id, i, e)
                continue
            chain = element.transform_chain
            if chain:
                box = transform_box(box, compose_transforms(chain))

            fragment_id = f"{icon.id}#{i}"
            label = classifications.get(fragment_id)
            fragments.append(
                ShapeFragment(
                    id=fragment_id,
                    source_icon_id=icon.id,
                    element_kind=kind,
                    raw_data=_raw_markup(element),
                    bounding_box=box,
                    geometric_type=label.geometric_type if label else infer_geometric_type(element, box),
                    semantic_category=(label.semantic_category if label else "").lower(),
                    tags=frozenset(t.lower() for t in (label.tags if label else [])) | icon.tags,
                    visual_weight=min(1.0, (box.width * box.height) / canvas_area) if canvas_area else 0.0,
                    name=(label.name if label and label.name else f"{icon.display_name}-{kind.value}-{i}").lower(),
                )
            )
        return fragments


def _keys_for(fragment: ShapeFragment, icon: LibraryIcon) -> list[str]:
    keys = [fragment.name]
    keys.extend(f"tag:{tag}" for tag in sorted(fragment.tags))
    if fragment.semantic_category:
        keys.append(f"category:{fragment.semantic_category}")
    keys.append(f"source:{icon.display_name.lower()}")
    if fragment.geometric_type is not GeometricType.COMPLEX:
        keys.append(f"geometric:{fragment.geometric_type.value}")
    return keys


async def gather_classifications(
    icons: Sequence[LibraryIcon],
    classifier: FragmentClassifier | None,
    timeout: float,
) -> tuple[dict[str, FragmentClassification], list[str]]:
    """Ask the classifier about every icon; icons it cannot answer stay unclassified."""
    warnings: list[str] = []
    labels: dict[str, FragmentClassification] = {}
    if classifier is None:
        warning = MissingExternalDataWarning("no fragment classifier; geometric types are inferred")
        logger.warning("%s", warning)
        return labels, [str(warning)]

    for icon in icons:
        elements = [_raw_markup(el) for el in find_drawables(icon.svg) if el.name.lower() in _ELEMENT_KINDS]
        try:
            answer = await asyncio.wait_for(classifier.classify(icon, elements), timeout)
        except Exception as e:
            answer = None
            logger.warning("Classifier failed for %s: %s", icon.id, e)
        if answer is None:
            warning = MissingExternalDataWarning(f"no classification for {icon.display_name}", icon=icon.id)
            warnings.append(str(warning))
            continue
        for i, label in enumerate(answer[: len(elements)]):
            labels[f"{icon.id}#{i}"] = label
    return labels, warnings
