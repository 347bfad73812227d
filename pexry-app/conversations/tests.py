import pytest

from accounts.models import UserAgent
from conversations.models import Conversation, ConversationMessage
from conversations.services import ConversationService
from notifications.models import Notification

pytestmark = pytest.mark.django_db


@pytest.fixture
def chat_agent(make_agent):
    return make_agent('helper', handle_live_chat=True)


@pytest.fixture
def conversation(buyer, seller):
    return ConversationService.create_conversation(
        buyer, Conversation.CONVERSATION, 'Question about the ebook', 'Is there a PDF version?',
        recipient_id=seller.id,
    )


@pytest.fixture
def support_request(buyer, chat_agent):
    return ConversationService.create_conversation(
        buyer, Conversation.SUPPORT, 'Payment stuck', 'My payment is still pending.',
        category='payment', priority=Conversation.HIGH,
    )


def post_json(client, url, payload=None):
    return client.post(url, payload or {}, content_type='application/json')


def test_create_conversation_notifies_recipient(login, buyer, seller):
    response = post_json(login(buyer), '/api/conversations/create/', {
        'type': 'conversation',
        'subject': 'Bulk license',
        'message': 'Do you sell team licenses?',
        'recipient_id': seller.id,
    })

    assert response.status_code == 201
    conversation = Conversation.objects.get(pk=response.json()['conversation_id'])
    assert set(conversation.participants.values_list('id', flat=True)) == {buyer.id, seller.id}
    assert conversation.last_message_by == buyer
    assert Notification.objects.filter(user=seller, type=Notification.MESSAGE).count() == 1
    assert not Notification.objects.filter(user=buyer).exists()


def test_conversation_requires_recipient(login, buyer):
    response = post_json(login(buyer), '/api/conversations/create/', {
        'type': 'conversation', 'subject': 'Hello', 'message': 'Anyone there?',
    })
    assert response.status_code == 400


def test_unknown_recipient_is_not_found(login, buyer):
    response = post_json(login(buyer), '/api/conversations/create/', {
        'type': 'conversation', 'subject': 'Hello', 'message': 'Hi', 'recipient_id': 99999,
    })
    assert response.status_code == 404


def test_cannot_reference_someone_elses_order(login, outsider, seller, make_order):
    order = make_order()
    response = post_json(login(outsider), '/api/conversations/create/', {
        'type': 'conversation', 'subject': 'About order', 'message': 'Hi',
        'recipient_id': seller.id, 'order_id': order.id,
    })
    assert response.status_code == 403


def test_list_shows_only_my_open_conversations(login, buyer, outsider, conversation):
    data = login(buyer).get('/api/conversations/').json()
    assert data['total'] == 1
    assert data['results'][0]['subject'] == 'Question about the ebook'

    assert login(outsider).get('/api/conversations/').json()['total'] == 0

    conversation.status = Conversation.CLOSED
    conversation.save()
    assert login(buyer).get('/api/conversations/').json()['total'] == 0


def test_non_participant_cannot_view(login, outsider, conversation):
    response = login(outsider).get(f'/api/conversations/{conversation.id}/')
    assert response.status_code == 403
    assert response.json()['error'] == 'You can only view conversations you are part of'


def test_send_message_notifies_other_side(login, seller, buyer, conversation):
    response = post_json(login(seller), f'/api/conversations/{conversation.id}/messages/', {
        'message': 'Yes, PDF and EPUB.',
    })

    assert response.status_code == 201
    conversation.refresh_from_db()
    assert conversation.last_message_by == seller
    assert Notification.objects.filter(user=buyer, type=Notification.MESSAGE).count() == 1


def test_only_agents_post_internal_notes(login, buyer, conversation):
    response = post_json(login(buyer), f'/api/conversations/{conversation.id}/messages/', {
        'message': 'secret', 'is_internal': True,
    })
    assert response.status_code == 403


def test_unread_count_and_mark_as_read(login, seller, buyer, conversation):
    ConversationService.send_message(buyer, conversation.id, 'Any update?')
    seller_client = login(seller)

    assert seller_client.get('/api/conversations/unread-count/').json()['count'] == 2

    response = post_json(seller_client, f'/api/conversations/{conversation.id}/read/')
    assert response.json()['updated'] == 2
    assert seller_client.get('/api/conversations/unread-count/').json()['count'] == 0
    assert login(buyer).get('/api/conversations/unread-count/').json()['count'] == 0


def test_support_request_is_assigned_to_available_agent(support_request, chat_agent):
    assert support_request.assigned_agent == chat_agent
    assert support_request.participants.filter(id=chat_agent.id).exists()

    record = UserAgent.objects.get(user=chat_agent)
    assert record.assigned_chats == 1
    assert record.total_chats_handled == 1
    assert Notification.objects.filter(user=chat_agent, type=Notification.MESSAGE).exists()


def test_support_request_without_agent_stays_unassigned(buyer, make_agent):
    make_agent('offline', handle_live_chat=True, availability=UserAgent.UNAVAILABLE)
    conversation = ConversationService.create_conversation(
        buyer, Conversation.SUPPORT, 'Refund', 'I want a refund.')
    assert conversation.assigned_agent is None


def test_agent_can_assign_self(login, make_agent, support_request, chat_agent):
    other = make_agent('second', handle_live_chat=True)

    response = post_json(login(other), f'/api/conversations/{support_request.id}/assign/')

    assert response.status_code == 200
    assert UserAgent.objects.get(user=other).assigned_chats == 1
    assert UserAgent.objects.get(user=chat_agent).assigned_chats == 0


def test_assign_self_only_on_support_requests(login, chat_agent, conversation):
    response = post_json(login(chat_agent), f'/api/conversations/{conversation.id}/assign/')
    assert response.status_code == 400
    assert response.json()['error'] == 'Can only assign agents to support conversations'


def test_requester_cannot_resolve(login, buyer, support_request):
    response = post_json(login(buyer), f'/api/conversations/{support_request.id}/status/', {'status': 'resolved'})
    assert response.status_code == 403


def test_agent_resolution_notifies_requester(login, buyer, chat_agent, support_request):
    response = post_json(
        login(chat_agent), f'/api/conversations/{support_request.id}/status/', {'status': 'resolved'})

    assert response.status_code == 200
    support_request.refresh_from_db()
    assert support_request.status == Conversation.RESOLVED
    assert UserAgent.objects.get(user=chat_agent).assigned_chats == 0

    note = ConversationMessage.objects.filter(conversation=support_request, is_internal=True).get()
    assert note.message == 'This conversation has been marked as resolved.'
    assert Notification.objects.filter(user=buyer, title='✅ Support Ticket Resolved').count() == 1


def test_internal_notes_hidden_from_requester(login, buyer, chat_agent, support_request):
    ConversationService.send_message(chat_agent, support_request.id, 'Checked the ledger', is_internal=True)

    buyer_view = login(buyer).get(f'/api/conversations/{support_request.id}/').json()['conversation']
    agent_view = login(chat_agent).get(f'/api/conversations/{support_request.id}/').json()['conversation']

    assert [m['message'] for m in buyer_view['messages']] == ['My payment is still pending.']
    assert len(agent_view['messages']) == 2


def test_support_queue_is_agent_only(login, buyer, chat_agent, support_request):
    assert login(buyer).get('/api/conversations/support/').status_code == 403
    data = login(chat_agent).get('/api/conversations/support/').json()
    assert data['total'] == 1
    agent_data = login(chat_agent).get('/api/conversations/agent/').json()
    assert [c['id'] for c in agent_data['conversations']] == [support_request.id]
