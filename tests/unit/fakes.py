"""Shared test doubles for catalog-driven tests"""

from watchlog.models import AnimeRecord, Relation, RelationTarget


def make_record(
    mal_id,
    title,
    episodes=12,
    aired="2020-01-01T00:00:00+00:00",
    media_type="TV",
    sequels=(),
    prequels=(),
    seasons=(),
    others=(),
    title_english=None,
):
    relations = []
    for kind, ids in (
        ("Sequel", sequels),
        ("Prequel", prequels),
        ("Season", seasons),
        ("Side story", others),
    ):
        if ids:
            relations.append(
                Relation(kind=kind, targets=[RelationTarget(mal_id=i) for i in ids])
            )
    return AnimeRecord(
        mal_id=mal_id,
        title=title,
        title_english=title_english,
        episodes=episodes,
        aired_from=aired,
        media_type=media_type,
        relations=relations,
    )


class FakeCatalog:
    """In-memory stand-in for JikanClient.fetch"""

    def __init__(self, records=(), failing=(), raising=()):
        self.records = {r.mal_id: r for r in records}
        self.failing = set(failing)
        self.raising = set(raising)
        self.calls = []

    def fetch(self, item_id):
        self.calls.append(item_id)
        if item_id in self.raising:
            raise RuntimeError(f"boom {item_id}")
        if item_id in self.failing:
            return None
        return self.records.get(item_id)
