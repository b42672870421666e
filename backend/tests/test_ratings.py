import pytest
from sqlalchemy import func, select

from forum.core.exceptions import BadRequest
from forum.models.rating import Rating
from forum.services.ratings import round_average, validate_rating

RATINGS = "/api/v1/ratings"


def _rate(client, user, answerid, value):
    return client.post(RATINGS, json={"answerId": answerid, "rating": value}, headers=user.headers)


def test_forum_scenario(client, make_user, post_question, post_answer):
    a = make_user("a", email="a@x.com")
    b = make_user("b")
    c = make_user("c")
    questionid = post_question(a)
    answerid = post_answer(b, questionid)

    first = _rate(client, a, answerid, 4.5)
    assert first.status_code == 200
    assert first.json() == {"averageRating": 4.5, "ratingCount": 1}

    own = _rate(client, b, answerid, 5)
    assert own.status_code == 403
    assert own.json()["detail"] == "You cannot rate your own answer"

    second = _rate(client, c, answerid, 3.0)
    assert second.status_code == 200
    # mean 3.75, reported to one decimal
    assert second.json() == {"averageRating": 3.8, "ratingCount": 2}


def test_rating_twice_overwrites(client, make_user, post_question, post_answer, db):
    alice = make_user()
    bob = make_user()
    answerid = post_answer(bob, post_question(alice))

    _rate(client, alice, answerid, 1)
    resp = _rate(client, alice, answerid, 3.5)

    assert resp.json() == {"averageRating": 3.5, "ratingCount": 1}
    rows = db.scalars(select(Rating).where(Rating.answer_id == answerid)).all()
    assert [(r.user_id, r.rating) for r in rows] == [(alice.id, 3.5)]


def test_average_tracks_current_value_of_each_rater(client, make_user, post_question, post_answer):
    owner = make_user()
    raters = [make_user() for _ in range(3)]
    answerid = post_answer(owner, post_question(owner))

    for rater, value in zip(raters, [1, 2, 3]):
        _rate(client, rater, answerid, value)
    resp = _rate(client, raters[0], answerid, 4)

    assert resp.json() == {"averageRating": 3.0, "ratingCount": 3}


def test_owner_never_gets_a_rating_row(client, make_user, post_question, post_answer, db):
    alice = make_user()
    answerid = post_answer(alice, post_question(alice))

    assert _rate(client, alice, answerid, 5).status_code == 403
    assert db.scalar(select(func.count(Rating.id))) == 0


@pytest.mark.parametrize("value", [-0.5, 5.5, 4.3, 0.25, "abc", None, True, "4.5"])
def test_invalid_rating_values(client, make_user, post_question, post_answer, value):
    alice = make_user()
    bob = make_user()
    answerid = post_answer(bob, post_question(alice))
    assert _rate(client, alice, answerid, value).status_code == 400


@pytest.mark.parametrize("value", [0, 0.5, 2.5, 5])
def test_boundary_values_accepted(client, make_user, post_question, post_answer, value):
    alice = make_user()
    bob = make_user()
    answerid = post_answer(bob, post_question(alice))
    assert _rate(client, alice, answerid, value).json()["averageRating"] == value


def test_rating_unknown_answer_is_not_found(client, make_user):
    alice = make_user()
    assert _rate(client, alice, 12345, 3).status_code == 404


def test_get_user_rating(client, make_user, post_question, post_answer):
    alice = make_user()
    bob = make_user()
    answerid = post_answer(bob, post_question(alice))

    assert client.get(f"{RATINGS}/{answerid}", headers=alice.headers).json() == {"rating": 0.0}
    _rate(client, alice, answerid, 2.5)
    assert client.get(f"{RATINGS}/{answerid}", headers=alice.headers).json() == {"rating": 2.5}


@pytest.mark.parametrize("raw, expected", [(3.75, 3.8), (3.25, 3.3), (4.0, 4.0), (2.3333333333, 2.3)])
def test_round_average_half_up(raw, expected):
    assert round_average(raw) == expected


def test_validate_rating_rejects_booleans():
    with pytest.raises(BadRequest):
        validate_rating(True)
