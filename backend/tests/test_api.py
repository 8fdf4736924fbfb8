from sqlalchemy.exc import OperationalError

from leaderboard import db
from leaderboard.models import AwardRecord, Player
from leaderboard.repository import SqlAlchemyLeaderboardStore


def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_health(client):
    res = client.get('/health')
    assert res.status_code == 200
    assert res.get_json() == {'status': 'ok'}


def test_list_users_empty(client):
    res = client.get('/users')
    assert res.status_code == 200
    assert res.get_json() == []


def test_register_and_list(client):
    res = client.post('/users', json={'username': 'Test'})
    assert res.status_code == 201
    player = res.get_json()
    assert player['username'] == 'Test'
    assert player['points'] == 0
    assert isinstance(player['id'], int)
    assert player['createdAt'] and player['updatedAt']

    res = client.get('/users')
    users = res.get_json()
    assert any(u['username'] == 'Test' and u['points'] == 0 for u in users)


def test_register_trims_username(client):
    res = client.post('/users', json={'username': '  Alice  '})
    assert res.status_code == 201
    assert res.get_json()['username'] == 'Alice'


def test_register_rejects_missing_or_blank_username(client):
    for body in ({}, {'username': ''}, {'username': '   '}, {'username': 42}):
        res = client.post('/users', json=body)
        assert res.status_code == 400
        assert res.get_json() == {'error': 'Username is required'}
    # Non-JSON body
    res = client.post('/users', data='username=Bob', content_type='text/plain')
    assert res.status_code == 400
    assert client.get('/users').get_json() == []


def test_register_rejects_long_username(client):
    res = client.post('/users', json={'username': 'x' * 65})
    assert res.status_code == 400
    assert 'error' in res.get_json()


def test_register_rejects_duplicate_username(client, make_player):
    make_player('Alice')
    res = client.post('/users', json={'username': 'Alice'})
    assert res.status_code == 400
    assert res.get_json() == {'error': 'Username already exists'}
    assert len(client.get('/users').get_json()) == 1


def test_users_sorted_by_points_desc(client, make_player):
    ids = [make_player(name)['id'] for name in ('Alice', 'Bob', 'Cara')]
    for pid, points in zip(ids, (3, 17, 9)):
        db.session.get(Player, pid).points = points
    db.session.commit()

    users = client.get('/users').get_json()
    assert [u['username'] for u in users] == ['Bob', 'Cara', 'Alice']
    points = [u['points'] for u in users]
    assert points == sorted(points, reverse=True)


def test_claim_points_for_player_with_existing_points(client, make_player):
    player = make_player('Alice')
    db.session.get(Player, player['id']).points = 5
    db.session.commit()

    res = client.post('/claim-points', json={'userId': player['id']})
    assert res.status_code == 200
    body = res.get_json()
    assert 1 <= body['pointsAwarded'] <= 10
    assert body['totalPoints'] == 5 + body['pointsAwarded']

    history = client.get('/point-history').get_json()
    assert len(history) == 1
    record = history[0]
    assert record['pointsAwarded'] == body['pointsAwarded']
    assert record['userId'] == {'id': player['id'], 'username': 'Alice'}
    assert record['timestamp']

    users = client.get('/users').get_json()
    assert users[0]['points'] == body['totalPoints']


def test_claim_points_accepts_string_id(client, make_player):
    player = make_player('Alice')
    res = client.post('/claim-points', json={'userId': str(player['id'])})
    assert res.status_code == 200


def test_claim_points_unknown_player(client, make_player):
    player = make_player('Alice')
    for user_id in (player['id'] + 100, 'not-an-id'):
        res = client.post('/claim-points', json={'userId': user_id})
        assert res.status_code == 404
        assert res.get_json() == {'error': 'User not found'}

    assert client.get('/point-history').get_json() == []
    assert AwardRecord.query.count() == 0
    assert client.get('/users').get_json()[0]['points'] == 0


def test_claim_points_requires_user_id(client):
    res = client.post('/claim-points', json={})
    assert res.status_code == 400
    assert res.get_json() == {'error': 'userId is required'}


def test_points_equal_sum_of_awards(client, make_player):
    alice = make_player('Alice')
    bob = make_player('Bob')
    totals = {alice['id']: 0, bob['id']: 0}
    for i in range(12):
        pid = alice['id'] if i % 3 else bob['id']
        body = client.post('/claim-points', json={'userId': pid}).get_json()
        assert 1 <= body['pointsAwarded'] <= 10
        totals[pid] += body['pointsAwarded']
        assert body['totalPoints'] == totals[pid]

    history = client.get('/point-history').get_json()
    assert len(history) == 12
    for pid, total in totals.items():
        awarded = sum(r['pointsAwarded'] for r in history if r['userId']['id'] == pid)
        assert awarded == total
    users = {u['id']: u for u in client.get('/users').get_json()}
    assert users[alice['id']]['points'] == totals[alice['id']]
    assert users[bob['id']]['points'] == totals[bob['id']]


def test_point_history_sorted_newest_first(client, make_player):
    player = make_player('Alice')
    for _ in range(5):
        client.post('/claim-points', json={'userId': player['id']})

    history = client.get('/point-history').get_json()
    timestamps = [r['timestamp'] for r in history]
    assert timestamps == sorted(timestamps, reverse=True)
    ids = [r['id'] for r in history]
    assert ids == sorted(ids, reverse=True)


def test_unknown_route_returns_json(client):
    res = client.get('/nope')
    assert res.status_code == 404
    assert 'error' in res.get_json()


def test_wrong_method_returns_json(client):
    res = client.delete('/users')
    assert res.status_code == 405
    assert 'error' in res.get_json()


def test_claim_points_out_of_range_id(client, make_player):
    make_player('Alice')
    for user_id in (10 ** 20, -(10 ** 20), 1e20, str(10 ** 20)):
        res = client.post('/claim-points', json={'userId': user_id})
        assert res.status_code == 404
        assert res.get_json() == {'error': 'User not found'}
    assert client.get('/point-history').get_json() == []


def _store_down(*args, **kwargs):
    raise OperationalError('SELECT 1', {}, Exception('database is unavailable'))


def test_list_users_storage_failure(client, monkeypatch):
    monkeypatch.setattr(SqlAlchemyLeaderboardStore, 'list_players', _store_down)
    res = client.get('/users')
    assert res.status_code == 500
    assert res.get_json() == {'error': 'Storage operation failed'}


def test_point_history_storage_failure(client, monkeypatch):
    monkeypatch.setattr(SqlAlchemyLeaderboardStore, 'list_awards', _store_down)
    res = client.get('/point-history')
    assert res.status_code == 500
    assert res.get_json() == {'error': 'Storage operation failed'}


def test_claim_points_storage_failure_rolls_back(client, make_player, monkeypatch):
    player = make_player('Alice')
    monkeypatch.setattr(SqlAlchemyLeaderboardStore, 'add_award', _store_down)
    res = client.post('/claim-points', json={'userId': player['id']})
    assert res.status_code == 500
    assert res.get_json() == {'error': 'Storage operation failed'}

    monkeypatch.undo()
    users = client.get('/users').get_json()
    assert users[0]['points'] == 0
    assert client.get('/point-history').get_json() == []


def test_health_reports_unavailable_store(client, monkeypatch):
    monkeypatch.setattr(SqlAlchemyLeaderboardStore, 'ping', _store_down)
    res = client.get('/health')
    assert res.status_code == 503
    body = res.get_json()
    assert body['status'] == 'unavailable'
    assert body['error'] == 'Storage operation failed'
