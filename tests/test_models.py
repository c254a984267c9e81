"""
Tests for feedback validation and storage.
"""

from tdx_feedback import Feedback, FeedbackStore, MAX_CONTEXT_LENGTH


def test_message_is_required():
    assert Feedback(message=None).validate() == ["Message can't be blank"]
    assert Feedback(message='   ').validate() == ["Message can't be blank"]


def test_context_is_optional():
    assert Feedback(message='Hi').is_valid()


def test_context_length_is_capped():
    assert Feedback(message='Hi', context='x' * MAX_CONTEXT_LENGTH).is_valid()

    errors = Feedback(message='Hi', context='x' * (MAX_CONTEXT_LENGTH + 1)).validate()
    assert errors == ['Context is too long (maximum is 10000 characters)']


def test_store_assigns_ids_and_timestamps():
    store = FeedbackStore()

    first = store.save(Feedback(message='one'))
    second = store.save(Feedback(message='two', context='ctx'))

    assert (first.id, second.id) == (1, 2)
    assert first.created_at is not None
    assert store.get(2) is second
    assert store.count() == 2
    assert [f.message for f in store.list_all()] == ['one', 'two']


def test_to_dict():
    feedback = FeedbackStore().save(Feedback(message='Hi', context='ctx'))

    data = feedback.to_dict()

    assert data['id'] == 1
    assert data['message'] == 'Hi'
    assert data['context'] == 'ctx'
    assert data['created_at'].startswith(str(feedback.created_at.year))
