"""
Record operations for projects, tokens, holders and events.

Every create/delete of a Project, Token or Holder appends exactly one Event
in the same commit.
"""
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from ..errors import NotFoundError
from .models import Event, Holder, Project, Severity, Token, enum_value, utcnow

EVENT_LIST_LIMIT = 100
PROJECT_DETAIL_EVENTS = 10
RECENT_EVENTS = 8


def _get(db: Session, model, entity: str, entity_id: str, *options):
    obj = db.get(model, entity_id, options=list(options))
    if obj is None:
        raise NotFoundError(entity, entity_id)
    return obj


def _like(term: str) -> str:
    return f"%{term}%"


def append_event(db: Session, type_: str, message: str, severity: Severity = Severity.INFO,
                 project_id: Optional[str] = None) -> Event:
    ev = Event(type=type_, message=message, severity=severity, project_id=project_id)
    db.add(ev)
    return ev


# --------------------------------- projects ---------------------------------

def list_projects(db: Session, search: str = "", status: str = "", chain: str = "") -> List[Project]:
    q = select(Project)
    if status:
        q = q.where(Project.status == status)
    if chain:
        q = q.where(Project.chain == chain)
    if search:
        s = _like(search)
        q = q.where(or_(Project.name.ilike(s), Project.symbol.ilike(s), Project.contract_address.ilike(s)))
    return list(db.scalars(q.order_by(Project.created_at.desc())))


def get_project(db: Session, project_id: str) -> Project:
    return _get(db, Project, "Project", project_id)


def get_project_detail(db: Session, project_id: str) -> dict:
    project = get_project(db, project_id)
    tokens = db.scalars(select(Token).where(Token.project_id == project_id)
                        .order_by(Token.created_at.desc())).all()
    holders = db.scalars(select(Holder).where(Holder.project_id == project_id)
                         .order_by(Holder.balance.desc())).all()
    events = db.scalars(select(Event).where(Event.project_id == project_id)
                        .order_by(Event.created_at.desc()).limit(PROJECT_DETAIL_EVENTS)).all()
    return {"project": project, "tokens": list(tokens), "holders": list(holders), "events": list(events)}


def create_project(db: Session, data: dict) -> Project:
    project = Project(**data)
    db.add(project)
    db.flush()
    append_event(
        db, "project_created",
        f'Project "{project.name}" ({project.symbol}) on {enum_value(project.chain)} was created',
        Severity.SUCCESS, project.id,
    )
    db.commit()
    db.refresh(project)
    return project


def update_project(db: Session, project_id: str, changes: dict) -> Project:
    project = get_project(db, project_id)
    for k, v in changes.items():
        setattr(project, k, v)
    db.commit()
    db.refresh(project)
    return project


def delete_project(db: Session, project_id: str) -> Project:
    project = get_project(db, project_id)
    db.delete(project)
    # the project row is gone, so the event carries no project reference
    append_event(db, "project_deleted", f'Project "{project.name}" ({project.symbol}) was deleted',
                 Severity.WARNING)
    db.commit()
    return project


# ---------------------------------- tokens ----------------------------------

def list_tokens(db: Session, search: str = "", project_id: str = "", chain: str = "") -> List[Token]:
    q = select(Token).options(selectinload(Token.project))
    if search:
        s = _like(search)
        q = q.where(or_(Token.name.ilike(s), Token.symbol.ilike(s), Token.contract_address.ilike(s)))
    if project_id:
        q = q.where(Token.project_id == project_id)
    if chain:
        q = q.where(Token.chain == chain)
    return list(db.scalars(q.order_by(Token.created_at.desc())))


def get_token(db: Session, token_id: str) -> Token:
    return _get(db, Token, "Token", token_id, selectinload(Token.project))


def create_token(db: Session, data: dict) -> Token:
    get_project(db, data["project_id"])
    token = Token(**data)
    db.add(token)
    append_event(
        db, "token_created",
        f'Token "{token.name}" ({token.symbol}) on {enum_value(token.chain)} was added',
        Severity.SUCCESS, token.project_id,
    )
    db.commit()
    db.refresh(token)
    return token


def update_token(db: Session, token_id: str, changes: dict) -> Token:
    token = get_token(db, token_id)
    for k, v in changes.items():
        setattr(token, k, v)
    db.commit()
    db.refresh(token)
    return token


def delete_token(db: Session, token_id: str) -> Token:
    token = get_token(db, token_id)
    db.delete(token)
    append_event(db, "token_deleted", f'Token "{token.name}" ({token.symbol}) was deleted',
                 Severity.WARNING, token.project_id)
    db.commit()
    return token


# ---------------------------------- holders ---------------------------------

def list_holders(db: Session, search: str = "", project_id: str = "", chain: str = "") -> List[Holder]:
    q = select(Holder).options(selectinload(Holder.project))
    if search:
        q = q.where(Holder.wallet_address.ilike(_like(search)))
    if project_id:
        q = q.where(Holder.project_id == project_id)
    if chain:
        q = q.where(Holder.chain == chain)
    return list(db.scalars(q.order_by(Holder.balance.desc())))


def get_holder(db: Session, holder_id: str) -> Holder:
    return _get(db, Holder, "Holder", holder_id, selectinload(Holder.project))


def holders_by_balance(db: Session, project_id: str) -> List[Holder]:
    q = select(Holder).where(Holder.project_id == project_id).order_by(Holder.balance.desc())
    return list(db.scalars(q))


def create_holder(db: Session, data: dict) -> Holder:
    get_project(db, data["project_id"])
    if data.get("first_seen") is None:
        data = {k: v for k, v in data.items() if k != "first_seen"}
    holder = Holder(**data)
    db.add(holder)
    append_event(
        db, "holder_added",
        f"Holder {holder.wallet_address[:8]}... added on {enum_value(holder.chain)}",
        Severity.INFO, holder.project_id,
    )
    db.commit()
    db.refresh(holder)
    return holder


def update_holder(db: Session, holder_id: str, changes: dict) -> Holder:
    holder = get_holder(db, holder_id)
    for k, v in changes.items():
        setattr(holder, k, v)
    holder.last_updated = utcnow()
    db.commit()
    db.refresh(holder)
    return holder


def delete_holder(db: Session, holder_id: str) -> Holder:
    holder = get_holder(db, holder_id)
    db.delete(holder)
    append_event(db, "holder_removed", f"Holder {holder.wallet_address[:8]}... was removed",
                 Severity.INFO, holder.project_id)
    db.commit()
    return holder


# ---------------------------------- events ----------------------------------

def list_events(db: Session, search: str = "", type_: str = "", severity: str = "",
                project_id: str = "", limit: int = EVENT_LIST_LIMIT) -> List[Event]:
    q = select(Event).options(selectinload(Event.project))
    if type_:
        q = q.where(Event.type == type_)
    if severity:
        q = q.where(Event.severity == severity)
    if project_id:
        q = q.where(Event.project_id == project_id)
    if search:
        q = q.where(Event.message.ilike(_like(search)))
    return list(db.scalars(q.order_by(Event.created_at.desc()).limit(limit)))


def get_event(db: Session, event_id: str) -> Event:
    return _get(db, Event, "Event", event_id, selectinload(Event.project))


def create_event(db: Session, data: dict) -> Event:
    if data.get("project_id"):
        get_project(db, data["project_id"])
    ev = append_event(db, data["type"], data["message"], data.get("severity") or Severity.INFO,
                      data.get("project_id"))
    db.commit()
    db.refresh(ev)
    return ev


def delete_event(db: Session, event_id: str) -> None:
    db.delete(get_event(db, event_id))
    db.commit()


# ---------------------------------- stats -----------------------------------

def stats(db: Session) -> dict:
    def count(model) -> int:
        return db.scalar(select(func.count()).select_from(model)) or 0

    return {
        "projects": count(Project),
        "tokens": count(Token),
        "holders": count(Holder),
        "events": count(Event),
        "recent_events": list_events(db, limit=RECENT_EVENTS),
    }
