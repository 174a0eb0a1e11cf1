from sqlalchemy import select

from app.models import Movie
from app.services.filters import (
    ContainsText,
    Equals,
    Filter,
    FilterBuilder,
    Intersects,
    MemberOf,
    escape_like,
)


async def _slugs(db, flt: Filter):
    result = await db.execute(select(Movie).where(*flt.clauses(Movie)).order_by(Movie.id))
    return [m.slug for m in result.scalars().all()]


def test_escape_like():
    assert escape_like("50%_off") == "50\\%\\_off"
    assert escape_like("a\\b") == "a\\\\b"
    assert escape_like("plain") == "plain"


def test_builder_collects_predicates():
    flt = (
        FilterBuilder()
        .equals("slug", "dune")
        .member_of("slug", ["dune", "mad-max"])
        .intersects("categories", [1, 2])
        .contains_text(("title",), "x")
        .build()
    )

    assert flt.predicates == (
        Equals("slug", "dune"),
        MemberOf("slug", ("dune", "mad-max")),
        Intersects("categories", (1, 2)),
        ContainsText(("title",), "x"),
    )
    assert len(flt.clauses(Movie)) == 4


def test_empty_filter_is_falsy():
    assert not FilterBuilder().build()
    assert not Filter()
    assert FilterBuilder().equals("slug", "dune").build()


async def test_equals_and_member_of(db):
    assert await _slugs(db, FilterBuilder().equals("slug", "dune").build()) == ["dune"]
    assert await _slugs(
        db, FilterBuilder().member_of("slug", ["pinocchio", "interstellar", "nope"]).build()
    ) == ["interstellar", "pinocchio"]


async def test_intersects_any_of_ids(db, catalog):
    comedy = catalog["categories"]["comedy"]
    action = catalog["categories"]["action"]

    flt = FilterBuilder().intersects("categories", [comedy, action]).build()

    assert await _slugs(db, flt) == ["pinocchio", "squid-game", "mad-max", "dune", "the-batman"]


async def test_intersects_without_ids_matches_nothing(db):
    assert await _slugs(db, FilterBuilder().intersects("categories", []).build()) == []


async def test_contains_text_is_case_insensitive_across_fields(db):
    flt = FilterBuilder().contains_text(("title", "english_title"), "FURY").build()
    assert await _slugs(db, flt) == ["mad-max"]


async def test_contains_text_matches_wildcards_literally(db):
    flt = FilterBuilder().contains_text(("title", "english_title"), "%").build()
    assert await _slugs(db, flt) == []

    flt = FilterBuilder().contains_text(("title", "english_title"), "_").build()
    assert await _slugs(db, flt) == []


async def test_predicates_are_conjunctive(db, catalog):
    flt = (
        FilterBuilder()
        .intersects("categories", [catalog["categories"]["action"]])
        .contains_text(("title", "english_title"), "the")
        .build()
    )
    assert await _slugs(db, flt) == ["the-batman"]
