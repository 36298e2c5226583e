from contextlib import contextmanager
from typing import Callable, Iterable, Optional
from folio.extensions import db

@contextmanager
def transactional(after_commit: Optional[Iterable[Callable[[], None]]] = None):
    """
    Context manager for database transactions.

    Callbacks in `after_commit` run only once the commit succeeded.
    """
    try:
        yield
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    for callback in after_commit or ():
        callback()
