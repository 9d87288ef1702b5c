#!/usr/bin/env python
"""Create or promote a user to the ADMIN role.
Usage: python bin/create_admin.py --username admin --email admin@example.com --password Secret123!
"""
import sys
import argparse

from backoffice.app import create_app
from backoffice.extensions import db
from backoffice.models.enums import RoleName
from backoffice.models.user import User
from backoffice.repositories.role_repository import RoleRepository
from backoffice.repositories.user_repository import UserRepository
from backoffice.services.password_hasher import hash_password

parser = argparse.ArgumentParser()
parser.add_argument('--username', default='admin')
parser.add_argument('--email',    default='admin@backoffice.local')
parser.add_argument('--password', default='ChangeMe123!')
args = parser.parse_args()

app = create_app()
with app.app_context():
    session = db.session
    try:
        users = UserRepository(session)
        admin_role = RoleRepository(session).get_or_create(
            RoleName.ADMIN, description='Administrateur', is_system=True
        )

        user = users.find_by_email(args.email.lower())
        if user:
            changed = False
            if not user.has_role(RoleName.ADMIN.value):
                user.roles.append(admin_role)
                changed = True
            if not user.is_active or not user.email_verified:
                user.is_active = True
                user.email_verified = True
                changed = True
            if changed:
                session.commit()
                print(f'Updated: {user.username} -> ADMIN / ACTIVE')
            else:
                print(f'Already admin: {user.username}')
        else:
            user = User(
                username=args.username,
                email=args.email.lower(),
                password_hash=hash_password(args.password),
                is_active=True,
                email_verified=True,
                created_by='create_admin',
            )
            user.roles.append(admin_role)
            users.save(user)
            print(f'Created admin: {user.username} (id={user.id})')
    except Exception as e:
        session.rollback()
        print(f'Error: {e}')
        sys.exit(1)
