"""Shared fixtures for the record engine tests."""

from datetime import datetime, timedelta, timezone

import pytest

from rada_engine.models import Engagement, Location, NewsArticle, NewsSource, Politician


@pytest.fixture
def make_politician():
    def factory(
        id,
        name,
        position="Member of Parliament",
        parties=("ODM",),
        constituency="",
        achievements=(),
        education="",
        status="active",
        years_in_office=None,
    ):
        return Politician(
            id=id,
            name=name,
            current_position=position,
            party_history=list(parties),
            constituency=constituency,
            key_achievements=list(achievements),
            education=education,
            status=status,
            years_in_office=years_in_office,
        )

    return factory


@pytest.fixture
def make_article():
    base = datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc)

    def factory(
        id,
        title,
        summary="",
        source="Daily Nation",
        hours_ago=0,
        category="politics",
        credibility=70,
        sentiment="neutral",
        views=0,
        shares=0,
        likes=0,
        tags=(),
        politicians=(),
        is_breaking=False,
        is_verified=False,
        country="Kenya",
        city=None,
    ):
        return NewsArticle(
            id=id,
            title=title,
            summary=summary,
            source=NewsSource(id=source.lower().replace(" ", "-"), name=source, credibility=credibility),
            published_at=base - timedelta(hours=hours_ago),
            category=category,
            tags=list(tags),
            politicians=list(politicians),
            location=Location(country=country, city=city),
            credibility=credibility,
            sentiment=sentiment,
            engagement=Engagement(views=views, shares=shares, likes=likes),
            is_breaking=is_breaking,
            is_verified=is_verified,
        )

    return factory


@pytest.fixture
def politicians(make_politician):
    return [
        make_politician(
            1,
            "Anne Waiguru",
            position="Governor of Kirinyaga",
            parties=("PNU", "Jubilee", "UDA"),
            constituency="Kirinyaga",
            achievements=("Huduma Centres", "County health reforms"),
            education="MA Economics",
            years_in_office=8,
        ),
        make_politician(
            2,
            "William Ruto",
            position="President",
            parties=("KANU", "ODM", "URP", "UDA"),
            constituency="Uasin Gishu",
            achievements=("Hustler Fund", "Affordable Housing", "Digital Superhighway"),
            education="PhD Plant Ecology",
            years_in_office=2,
        ),
        make_politician(
            3,
            "Raila Odinga",
            position="Former Prime Minister",
            parties=("ODM",),
            constituency="Lang'ata",
            achievements=("2010 Constitution",),
            education="MSc Mechanical Engineering",
            status="former",
            years_in_office=5,
        ),
        make_politician(
            4,
            "Johnson Sakaja",
            position="Senator, Nairobi",
            parties=("TNA", "Jubilee"),
            constituency="Nairobi",
            education="BSc Actuarial Science",
            years_in_office=None,
        ),
        make_politician(
            5,
            "Aden Duale",
            position="Cabinet Secretary, Minister for Defence",
            parties=("URP", "Jubilee", "UDA"),
            constituency="Garissa Township",
            achievements=("Leader of Majority",),
            education="BSc Agriculture",
            years_in_office=15,
        ),
    ]


@pytest.fixture
def articles(make_article):
    return [
        make_article(
            "a1",
            "Finance Bill passes second reading",
            summary="MPs vote on the Finance Bill amid protests",
            source="Daily Nation",
            hours_ago=5,
            category="economy",
            credibility=85,
            sentiment="negative",
            views=900,
            shares=120,
            likes=40,
            tags=("finance", "parliament"),
            politicians=("William Ruto",),
            is_breaking=True,
            is_verified=True,
            city="Nairobi",
        ),
        make_article(
            "a2",
            "Governor launches county health plan",
            summary="Anne Waiguru unveils a new health strategy",
            source="The Standard",
            hours_ago=30,
            category="health",
            credibility=72,
            sentiment="positive",
            views=300,
            shares=10,
            likes=80,
            tags=("health",),
            politicians=("Anne Waiguru",),
            city="Kerugoya",
        ),
        make_article(
            "a3",
            "Opposition rally draws thousands",
            summary="Raila Odinga addresses supporters",
            source="Citizen Digital",
            hours_ago=2,
            credibility=45,
            sentiment="mixed",
            views=1500,
            shares=300,
            likes=10,
            tags=("rally", "opposition"),
            politicians=("Raila Odinga", "William Ruto"),
            is_breaking=True,
        ),
        make_article(
            "a4",
            "Senate debates revenue sharing formula",
            source="Daily Nation",
            hours_ago=50,
            category="politics",
            credibility=65,
            views=100,
            shares=5,
            likes=1,
            tags=("senate", "finance"),
            politicians=("Johnson Sakaja",),
            country="Kenya",
        ),
    ]
