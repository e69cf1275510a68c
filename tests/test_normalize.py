import pytest

from quizgen.errors import ValidationError
from quizgen.normalize import NO_EXPLANATION, normalize_question, normalize_questions


def _question(**overrides):
    raw = {
        "id": "q1",
        "text": "What is the capital of France?",
        "options": [
            {"id": "a", "text": "Paris", "isCorrect": True},
            {"id": "b", "text": "Lyon", "isCorrect": False},
        ],
        "explanation": "Paris is named in the first paragraph.",
    }
    raw.update(overrides)
    return raw


def test_well_formed_question_is_kept() -> None:
    (question,) = normalize_questions([_question()])

    assert question.id == "q1"
    assert [option.text for option in question.options] == ["Paris", "Lyon"]
    assert question.options[0].is_correct is True
    assert question.explanation.startswith("Paris")


def test_missing_fields_get_placeholders() -> None:
    raw = {"text": "Pick one", "options": [{"text": "Yes"}, {"id": "b"}, "garbage"]}

    question = normalize_question(raw, 2)

    assert question is not None
    assert question.id == "q_3"
    assert question.explanation == NO_EXPLANATION
    assert [(option.id, option.text) for option in question.options] == [
        ("2_0", "Yes"),
        ("b", "Option 2"),
        ("2_2", "Option 3"),
    ]
    assert all(option.is_correct is False for option in question.options)


def test_option_placeholder_ids_use_question_id() -> None:
    question = normalize_question(_question(options=[{"text": "True"}]), 0)
    assert question.options[0].id == "q1_0"


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, True), ("true", True), ("yes", True), (1, True), ("false", False), ("0", False), (None, False)],
)
def test_correct_flag_coercion(value, expected: bool) -> None:
    question = normalize_question(_question(options=[{"id": "a", "text": "x", "isCorrect": value}]), 0)
    assert question.options[0].is_correct is expected


def test_numeric_ids_and_text_become_strings() -> None:
    question = normalize_question(_question(id=7, options=[{"id": 1, "text": 1789}]), 0)

    assert question.id == "7"
    assert (question.options[0].id, question.options[0].text) == ("1", "1789")


def test_only_first_correct_option_survives() -> None:
    options = [
        {"id": "a", "text": "Paris", "isCorrect": False},
        {"id": "b", "text": "Paris, France", "isCorrect": True},
        {"id": "c", "text": "The French capital", "isCorrect": True},
    ]

    question = normalize_question(_question(options=options), 0)

    assert [option.is_correct for option in question.options] == [False, True, False]


@pytest.mark.parametrize(
    "raw",
    [
        "not an object",
        None,
        _question(options=[]),
        _question(options="a, b, c"),
    ],
)
def test_unusable_elements_are_dropped(raw) -> None:
    assert normalize_question(raw, 0) is None


@pytest.mark.parametrize("text", [None, "", "   ", {"nested": True}])
def test_missing_question_text_gets_placeholder(text) -> None:
    question = normalize_question(_question(text=text), 4)

    assert question is not None
    assert question.text == "Question 5"
    assert len(question.options) == 2


def test_untitled_question_with_options_is_kept() -> None:
    (question,) = normalize_questions([{"id": "q1", "options": [{"id": "a", "text": "4", "isCorrect": True}]}])

    assert (question.id, question.text) == ("q1", "Question 1")
    assert question.options[0].is_correct is True


def test_mixed_batch_keeps_good_questions_in_order() -> None:
    questions = normalize_questions(
        [_question(id="first"), {"text": "no options"}, 12, _question(id="second")]
    )
    assert [question.id for question in questions] == ["first", "second"]


@pytest.mark.parametrize("items", [[], [{}], ["x", {"options": []}]])
def test_empty_result_is_a_validation_error(items) -> None:
    with pytest.raises(ValidationError):
        normalize_questions(items)
