#!/usr/bin/env python3
"""
  This demo application serves a small inventory through the nodeattr json:api
  When nodeattr-server is installed, you can run this app:
  $ python3 demo.py [Listener-IP]

  This will run the example on http://Listener-Ip:5000

  - An sqlite database is created and populated
  - A jsonapi rest API is created
  - An admin and a user token are printed, pass them as "Authorization: Bearer <token>"

"""
import sys
from flask import Flask
from flask_jwt_extended import create_access_token
from nodeattr_server import DB, Cluster, Group, Node, NodeattrAPI


def populate():
    cluster = Cluster(name="demo", level_params={"ntp": "pool.ntp.org"})
    group = Group(name="compute", priority=10, level_params={"role": "compute"}, cluster=cluster)
    for i in range(4):
        node = Node(name=f"node{i:02}", cluster=cluster)
        group.nodes.append(node)
    DB.session.add(cluster)
    DB.session.commit()


def create_app(config_filename=None, host="localhost"):
    app = Flask("nodeattr_demo")
    app.config.update(
        SQLALCHEMY_DATABASE_URI="sqlite://",
        JWT_SECRET_KEY="change-me-in-production",
        JWT_ACCESS_TOKEN_EXPIRES=False,
    )
    if config_filename:
        app.config.from_pyfile(config_filename)

    with app.app_context():
        NodeattrAPI(app, prefix="")
        DB.create_all()
        populate()
        print("Admin token: Bearer", create_access_token(identity="admin", additional_claims={"admin": True}))
        print("User token:  Bearer", create_access_token(identity="user"))
    print(f"Created API: http://{host}:5000/clusters")
    return app


# Address where the api will be hosted, change this if you're not running the app on localhost!
host = sys.argv[1] if sys.argv[1:] else "127.0.0.1"
app = create_app(host=host)

if __name__ == "__main__":
    app.run(host=host)
