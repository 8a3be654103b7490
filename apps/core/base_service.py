from sqlmodel import Session

class BaseService:
    def __init__(self, session: Session):
        self.session = session

    def save(self, obj):
        """Add, commit and refresh a single row."""
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj
