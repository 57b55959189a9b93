# backend/repositories/users.py
from sqlalchemy import func, or_

from models.users import User
from repositories.base import Repository


class UserRepository(Repository[User]):
    model = User

    def get_by_username(self, username):
        return self.get_by(func.lower(User.username) == username.strip().lower())

    def get_by_email(self, email):
        return self.get_by(func.lower(User.email) == email.strip().lower())

    def search(self, term=None, role=None, active=None):
        query = self.query()
        if role is not None:
            query = query.filter(User.role == role)
        if active is not None:
            query = query.filter(User.is_active.is_(active))
        if term:
            like = f"%{term.strip()}%"
            query = query.filter(or_(User.username.ilike(like), User.email.ilike(like)))
        return query.order_by(User.id.asc()).all()
