import pytest
from flask import Flask
from flask_jwt_extended import create_access_token
from nodeattr_server import DB, NodeattrAPI, Cluster, Group, Node

JSONAPI_CONTENT_TYPE = "application/vnd.api+json"
JWT_SECRET_KEY = "nodeattr-test-secret-key-0123456789abcdef"


@pytest.fixture
def app():
    app = Flask("nodeattr_test")
    app.config.update(
        SQLALCHEMY_DATABASE_URI="sqlite://",
        JWT_SECRET_KEY=JWT_SECRET_KEY,
        TESTING=True,
    )
    NodeattrAPI(app)
    with app.app_context():
        DB.create_all()
    yield app
    with app.app_context():
        DB.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    """
    Push an app context for tests that use the models directly
    """
    with app.app_context():
        yield DB
        DB.session.rollback()


def bearer(app, admin=None):
    claims = {} if admin is None else {"admin": admin}
    with app.app_context():
        token = create_access_token(identity="tester", additional_claims=claims)
    return {"Authorization": f"Bearer {token}", "Content-Type": JSONAPI_CONTENT_TYPE}


@pytest.fixture
def admin_headers(app):
    return bearer(app, admin=True)


@pytest.fixture
def user_headers(app):
    return bearer(app)


@pytest.fixture
def inventory(db):
    """
    c1: groups g1 (priority 1) and g2 (priority 2), nodes n1 and n2, n1 in g1
    c2: node n1
    """
    c1 = Cluster(name="c1", level_params={"ntp": "c1", "role": "none"})
    c2 = Cluster(name="c2")
    g1 = Group(name="g1", priority=1, cluster=c1, level_params={"role": "compute"})
    g2 = Group(name="g2", priority=2, cluster=c1)
    n1 = Node(name="n1", cluster=c1, level_params={"ip": "10.0.0.1"})
    n2 = Node(name="n2", cluster=c1)
    n3 = Node(name="n1", cluster=c2)
    g1.nodes.append(n1)
    db.session.add_all([c1, c2, g1, g2, n1, n2, n3])
    db.session.commit()
    return dict(c1=c1, c2=c2, g1=g1, g2=g2, n1=n1, n2=n2, c2_n1=n3)
