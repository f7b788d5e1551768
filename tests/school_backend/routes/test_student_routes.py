from datetime import timedelta

import pytest

from school_backend.auth.passwords import verify_password
from school_backend.models.user import User
from school_backend.services import accounts, mailer


@pytest.fixture
def seeded(app, client):
    with app.state.session_factory() as db:
        accounts.create_account(db, email='boss@x.com', password='secret1', role='admin', name='Boss')
        accounts.create_account(
            db,
            email='a@x.com',
            password='secret1',
            role='student',
            name='Asha Rao',
            number='9876543210',
            class_name='10A',
            address='12 Lake Road',
            father_name='Ravi',
        )
        accounts.create_account(
            db,
            email='b@x.com',
            password='secret1',
            role='student',
            name='Bilal',
            class_name='9B',
            address='Hill Street',
        )
    return client


@pytest.fixture
def admin_headers(make_token):
    return {'Authorization': f"Bearer {make_token('boss@x.com', 'admin')}"}


@pytest.fixture
def student_headers(make_token):
    return {'Authorization': f"Bearer {make_token('a@x.com', 'student')}"}


def _account_id(app, email: str) -> int:
    with app.state.session_factory() as db:
        return db.query(User).filter(User.email == email).one().id


def test_student_data_returns_own_record_with_wire_field_names(seeded, student_headers) -> None:
    response = seeded.get('/student-data', headers=student_headers)

    assert response.status_code == 200
    body = response.json()
    assert body['email'] == 'a@x.com'
    assert body['class'] == '10A'
    assert body['fatherName'] == 'Ravi'
    assert body['passportImage'] is None
    assert 'password_hash' not in body
    assert 'password' not in body


def test_student_data_accepts_raw_authorization_header(seeded, make_token) -> None:
    response = seeded.get('/student-data', headers={'Authorization': make_token('a@x.com', 'student')})

    assert response.status_code == 200
    assert response.json()['email'] == 'a@x.com'


def test_student_data_for_unknown_email_returns_empty(seeded, make_token) -> None:
    headers = {'Authorization': f"Bearer {make_token('ghost@x.com', 'student')}"}

    response = seeded.get('/student-data', headers=headers)

    assert response.status_code == 200
    assert response.json() is None


def test_student_data_rejects_admin_token(seeded, admin_headers) -> None:
    response = seeded.get('/student-data', headers=admin_headers)

    assert response.status_code == 403
    assert response.json() == {'detail': 'Permission denied'}


def test_gate_rejects_missing_invalid_and_expired_tokens(seeded, make_token) -> None:
    expired = make_token('a@x.com', 'student', expires_delta=timedelta(seconds=-30))

    missing = seeded.get('/student-data')
    invalid = seeded.get('/student-data', headers={'Authorization': 'Bearer not-a-token'})
    stale = seeded.get('/student-data', headers={'Authorization': f'Bearer {expired}'})

    assert missing.status_code == 401
    assert missing.json() == {'detail': 'Access denied. Token missing.'}
    assert invalid.status_code == 403
    assert invalid.json() == {'detail': 'Access denied. Invalid token.'}
    assert stale.status_code == 403
    assert stale.json() == {'detail': 'Access denied. Token expired.'}


def test_login_cookie_is_not_an_access_credential(seeded) -> None:
    login = seeded.post('/login', json={'email': 'a@x.com', 'password': 'secret1'})
    assert login.status_code == 200
    assert seeded.cookies.get('token') == login.json()['token']

    response = seeded.get('/student-data')

    assert response.status_code == 401


@pytest.mark.parametrize(
    ('method', 'path', 'kwargs'),
    [
        ('get', '/all-data', {}),
        ('post', '/add-student', {'json': {'email': 'c@x.com', 'password': 'secret1'}}),
        ('put', '/update-student/1', {'json': {'name': 'Hacked'}}),
        ('post', '/send-test-email', {'json': {'email': 'c@x.com', 'name': 'C'}}),
    ],
)
def test_admin_endpoints_reject_student_token(seeded, student_headers, method, path, kwargs) -> None:
    response = getattr(seeded, method)(path, headers=student_headers, **kwargs)

    assert response.status_code == 403
    assert response.json() == {'detail': 'Permission denied'}


def test_all_data_filters_across_contact_fields(seeded, admin_headers) -> None:
    everything = seeded.get('/all-data', headers=admin_headers)
    by_address = seeded.get('/all-data', params={'searchTerm': 'LAKE'}, headers=admin_headers)
    by_email = seeded.get('/all-data', params={'searchTerm': 'b@x'}, headers=admin_headers)

    assert [r['email'] for r in everything.json()] == ['boss@x.com', 'a@x.com', 'b@x.com']
    assert [r['email'] for r in by_address.json()] == ['a@x.com']
    assert [r['email'] for r in by_email.json()] == ['b@x.com']


def test_search_matches_name_or_class_for_any_token(seeded, student_headers) -> None:
    by_class = seeded.get('/search', params={'searchTerm': '9b'}, headers=student_headers)
    by_address = seeded.get('/search', params={'searchTerm': 'Lake'}, headers=student_headers)

    assert by_class.status_code == 200
    assert [r['email'] for r in by_class.json()] == ['b@x.com']
    assert by_address.json() == []


def test_search_terms_are_case_insensitive_patterns(seeded, admin_headers, student_headers) -> None:
    anchored = seeded.get('/search', params={'searchTerm': '^bil'}, headers=student_headers)
    by_number = seeded.get('/all-data', params={'searchTerm': r'^\d{10}$'}, headers=admin_headers)

    assert [r['email'] for r in anchored.json()] == ['b@x.com']
    assert [r['email'] for r in by_number.json()] == ['a@x.com']


@pytest.mark.parametrize('path', ['/search', '/all-data'])
def test_malformed_search_pattern_is_rejected(seeded, admin_headers, path) -> None:
    response = seeded.get(path, params={'searchTerm': '[unclosed'}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json() == {'detail': 'Invalid search term'}


def test_update_student_rejects_oversized_password(seeded, app, admin_headers) -> None:
    student_id = _account_id(app, 'a@x.com')

    response = seeded.put(f'/update-student/{student_id}', json={'password': 'x' * 5000}, headers=admin_headers)

    assert response.status_code == 400
    assert 'password' in response.json()['fields']


def test_add_student_hashes_password_and_allows_login(seeded, app, admin_headers) -> None:
    response = seeded.post(
        '/add-student',
        json={'email': 'c@x.com', 'name': 'Chen', 'number': '1234567890', 'class': '9B', 'address': 'Park', 'password': 'secret1'},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json() == {'message': 'Student added successfully'}
    with app.state.session_factory() as db:
        user = db.query(User).filter(User.email == 'c@x.com').one()
        assert user.role == 'student'
        assert user.class_name == '9B'
        assert user.password_hash != 'secret1'
    assert seeded.post('/login', json={'email': 'c@x.com', 'password': 'secret1'}).status_code == 200


def test_add_student_rejects_existing_email(seeded, admin_headers) -> None:
    response = seeded.post('/add-student', json={'email': 'a@x.com', 'password': 'secret1'}, headers=admin_headers)

    assert response.status_code == 400


def test_update_student_rehashes_password(seeded, app, admin_headers) -> None:
    student_id = _account_id(app, 'a@x.com')

    response = seeded.put(
        f'/update-student/{student_id}',
        json={'name': 'Asha R.', 'class': '11A', 'password': 'newpass1'},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json() == {'message': 'Student updated successfully'}
    with app.state.session_factory() as db:
        user = db.get(User, student_id)
        assert user.name == 'Asha R.'
        assert user.class_name == '11A'
        assert user.address == '12 Lake Road'
        assert user.password_hash != 'newpass1'
        assert verify_password('newpass1', user.password_hash)
    assert seeded.post('/login', json={'email': 'a@x.com', 'password': 'newpass1'}).status_code == 200
    assert seeded.post('/login', json={'email': 'a@x.com', 'password': 'secret1'}).status_code == 401


def test_update_student_missing_id_is_not_found(seeded, admin_headers) -> None:
    response = seeded.put('/update-student/999', json={'name': 'Nobody'}, headers=admin_headers)

    assert response.status_code == 404
    assert response.json() == {'detail': 'Student not found'}


def test_update_student_to_taken_email_is_rejected(seeded, app, admin_headers) -> None:
    student_id = _account_id(app, 'b@x.com')

    response = seeded.put(f'/update-student/{student_id}', json={'email': 'a@x.com'}, headers=admin_headers)

    assert response.status_code == 400


def test_remove_student(seeded, app, student_headers) -> None:
    student_id = _account_id(app, 'b@x.com')

    removed = seeded.delete(f'/remove-student/{student_id}', headers=student_headers)
    again = seeded.delete(f'/remove-student/{student_id}', headers=student_headers)

    assert removed.status_code == 200
    assert removed.json() == {'message': 'Student removed successfully'}
    assert again.status_code == 404
    assert again.json() == {'detail': 'Student not found'}


def test_remove_student_requires_token(seeded) -> None:
    assert seeded.delete('/remove-student/1').status_code == 401


def test_add_admin(seeded, admin_headers) -> None:
    payload = {'email': 'second@x.com', 'name': 'Second', 'password': 'secret1'}

    created = seeded.post('/add-admin', json=payload, headers=admin_headers)
    duplicate = seeded.post('/add-admin', json=payload, headers=admin_headers)
    login = seeded.post('/login', json={'email': 'second@x.com', 'password': 'secret1'})

    assert created.json() == {'message': 'Admin added successfully'}
    assert duplicate.status_code == 400
    assert duplicate.json() == {'detail': 'Admin with the provided email already exists'}
    assert login.json()['role'] == 'admin'


def test_all_classes_and_students_of_class(seeded, student_headers) -> None:
    classes = seeded.get('/all-classes', headers=student_headers)
    members = seeded.get('/students-of-class/9B', headers=student_headers)

    assert classes.json() == ['10A', '9B']
    assert [r['email'] for r in members.json()] == ['b@x.com']


def test_send_test_email_without_mail_config(seeded, admin_headers) -> None:
    response = seeded.post('/send-test-email', json={'email': 'c@x.com', 'name': 'C'}, headers=admin_headers)

    assert response.status_code == 503


def test_send_test_email(seeded, app, admin_headers, monkeypatch: pytest.MonkeyPatch) -> None:
    sent = []
    monkeypatch.setattr(mailer, 'send_email', lambda settings, to, subject, text: sent.append((to, subject, text)))

    response = seeded.post('/send-test-email', json={'email': 'c@x.com', 'name': 'Chen'}, headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {'message': 'Test email sent successfully'}
    assert sent == [('c@x.com', 'Test Email', 'Hello Chen,\nThis is a test email.')]


def test_full_registration_scenario(client, make_token) -> None:
    registered = client.post('/register', data={'email': 'a@x.com', 'password': 'secret1', 'role': 'student'})
    duplicate = client.post('/register', data={'email': 'a@x.com', 'password': 'secret1', 'role': 'student'})
    login = client.post('/login', json={'email': 'a@x.com', 'password': 'secret1'})
    token = login.json()['token']
    own = client.get('/student-data', headers={'Authorization': f'Bearer {token}'})
    stranger = client.get(
        '/student-data',
        headers={'Authorization': f"Bearer {make_token('nobody@x.com', 'student')}"},
    )

    assert registered.status_code == 200
    assert duplicate.status_code == 400
    assert login.status_code == 200
    assert own.json()['email'] == 'a@x.com'
    assert stranger.status_code == 200
    assert stranger.json() is None
