"""
CRUD routes for projects, tokens, holders and events, plus dashboard stats.

Mutations publish a notice on the app's notification channel: ``success``
when the change lands, ``error`` (then re-raised) when it does not.
"""
from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from .. import schemas
from ..notifications import NotificationChannel
from ..storage import records
from ..storage.models import Chain, ProjectStatus, Severity
from .deps import get_channel, get_db

router = APIRouter(prefix="/api")


def _mutate(channel: NotificationChannel, what: str, fn: Callable, *args):
    try:
        return fn(*args)
    except Exception as e:
        channel.publish("error", f"Failed to {what}: {e}")
        raise


def _val(v) -> str:
    return v.value if v is not None else ""


# --------------------------------- projects ---------------------------------

@router.get("/projects", response_model=List[schemas.ProjectOut])
def list_projects(search: str = "", status: Optional[ProjectStatus] = None, chain: Optional[Chain] = None,
                  db: Session = Depends(get_db)):
    rows = records.list_projects(db, search=search, status=_val(status), chain=_val(chain))
    return [schemas.ProjectOut.model_validate(p) for p in rows]


@router.get("/projects/{project_id}", response_model=schemas.ProjectDetail)
def get_project(project_id: str, db: Session = Depends(get_db)):
    d = records.get_project_detail(db, project_id)
    return schemas.ProjectDetail(
        **schemas.ProjectOut.model_validate(d["project"]).model_dump(),
        tokens=[schemas.TokenOut.model_validate(t) for t in d["tokens"]],
        holders=[schemas.HolderOut.model_validate(h) for h in d["holders"]],
        events=[schemas.EventOut.model_validate(e) for e in d["events"]],
    )


@router.post("/projects", response_model=schemas.ProjectOut, status_code=201)
def create_project(body: schemas.ProjectCreate, db: Session = Depends(get_db),
                   channel: NotificationChannel = Depends(get_channel)):
    project = _mutate(channel, "create project", records.create_project, db, body.model_dump())
    channel.publish("success", f'Project "{project.name}" created')
    return schemas.ProjectOut.model_validate(project)


@router.put("/projects/{project_id}", response_model=schemas.ProjectOut)
def update_project(project_id: str, body: schemas.ProjectUpdate, db: Session = Depends(get_db),
                   channel: NotificationChannel = Depends(get_channel)):
    changes = body.changes()
    project = _mutate(channel, "update project", records.update_project, db, project_id, changes)
    channel.publish("success", f'Project "{project.name}" updated')
    return schemas.ProjectOut.model_validate(project)


@router.delete("/projects/{project_id}", status_code=204)
def delete_project(project_id: str, db: Session = Depends(get_db),
                   channel: NotificationChannel = Depends(get_channel)):
    project = _mutate(channel, "delete project", records.delete_project, db, project_id)
    channel.publish("success", f'Project "{project.name}" deleted')
    return Response(status_code=204)


# ---------------------------------- tokens ----------------------------------

@router.get("/tokens", response_model=List[schemas.TokenOut])
def list_tokens(search: str = "", project_id: str = "", chain: Optional[Chain] = None,
                db: Session = Depends(get_db)):
    rows = records.list_tokens(db, search=search, project_id=project_id, chain=_val(chain))
    return [schemas.TokenOut.model_validate(t) for t in rows]


@router.get("/tokens/{token_id}", response_model=schemas.TokenOut)
def get_token(token_id: str, db: Session = Depends(get_db)):
    return schemas.TokenOut.model_validate(records.get_token(db, token_id))


@router.post("/tokens", response_model=schemas.TokenOut, status_code=201)
def create_token(body: schemas.TokenCreate, db: Session = Depends(get_db),
                 channel: NotificationChannel = Depends(get_channel)):
    token = _mutate(channel, "create token", records.create_token, db, body.model_dump())
    channel.publish("success", f'Token "{token.symbol}" created')
    return schemas.TokenOut.model_validate(token)


@router.put("/tokens/{token_id}", response_model=schemas.TokenOut)
def update_token(token_id: str, body: schemas.TokenUpdate, db: Session = Depends(get_db),
                 channel: NotificationChannel = Depends(get_channel)):
    changes = body.changes()
    token = _mutate(channel, "update token", records.update_token, db, token_id, changes)
    channel.publish("success", f'Token "{token.symbol}" updated')
    return schemas.TokenOut.model_validate(token)


@router.delete("/tokens/{token_id}", status_code=204)
def delete_token(token_id: str, db: Session = Depends(get_db),
                 channel: NotificationChannel = Depends(get_channel)):
    token = _mutate(channel, "delete token", records.delete_token, db, token_id)
    channel.publish("success", f'Token "{token.symbol}" deleted')
    return Response(status_code=204)


# ---------------------------------- holders ---------------------------------

@router.get("/holders", response_model=List[schemas.HolderOut])
def list_holders(search: str = "", project_id: str = "", chain: Optional[Chain] = None,
                 db: Session = Depends(get_db)):
    rows = records.list_holders(db, search=search, project_id=project_id, chain=_val(chain))
    return [schemas.HolderOut.model_validate(h) for h in rows]


@router.get("/holders/{holder_id}", response_model=schemas.HolderOut)
def get_holder(holder_id: str, db: Session = Depends(get_db)):
    return schemas.HolderOut.model_validate(records.get_holder(db, holder_id))


@router.post("/holders", response_model=schemas.HolderOut, status_code=201)
def create_holder(body: schemas.HolderCreate, db: Session = Depends(get_db),
                  channel: NotificationChannel = Depends(get_channel)):
    holder = _mutate(channel, "add holder", records.create_holder, db, body.model_dump())
    channel.publish("success", f"Holder {holder.wallet_address[:8]}... added")
    return schemas.HolderOut.model_validate(holder)


@router.put("/holders/{holder_id}", response_model=schemas.HolderOut)
def update_holder(holder_id: str, body: schemas.HolderUpdate, db: Session = Depends(get_db),
                  channel: NotificationChannel = Depends(get_channel)):
    changes = body.changes()
    holder = _mutate(channel, "update holder", records.update_holder, db, holder_id, changes)
    channel.publish("success", f"Holder {holder.wallet_address[:8]}... updated")
    return schemas.HolderOut.model_validate(holder)


@router.delete("/holders/{holder_id}", status_code=204)
def delete_holder(holder_id: str, db: Session = Depends(get_db),
                  channel: NotificationChannel = Depends(get_channel)):
    holder = _mutate(channel, "remove holder", records.delete_holder, db, holder_id)
    channel.publish("success", f"Holder {holder.wallet_address[:8]}... removed")
    return Response(status_code=204)


# ---------------------------------- events ----------------------------------

@router.get("/events", response_model=List[schemas.EventOut])
def list_events(search: str = "", type: str = "", severity: Optional[Severity] = None,
                project_id: str = "", db: Session = Depends(get_db)):
    rows = records.list_events(db, search=search, type_=type, severity=_val(severity), project_id=project_id)
    return [schemas.EventOut.model_validate(e) for e in rows]


@router.get("/events/{event_id}", response_model=schemas.EventOut)
def get_event(event_id: str, db: Session = Depends(get_db)):
    return schemas.EventOut.model_validate(records.get_event(db, event_id))


@router.post("/events", response_model=schemas.EventOut, status_code=201)
def create_event(body: schemas.EventCreate, db: Session = Depends(get_db),
                 channel: NotificationChannel = Depends(get_channel)):
    ev = _mutate(channel, "log event", records.create_event, db, body.model_dump())
    channel.publish("success", "Event logged")
    return schemas.EventOut.model_validate(ev)


@router.delete("/events/{event_id}", status_code=204)
def delete_event(event_id: str, db: Session = Depends(get_db),
                 channel: NotificationChannel = Depends(get_channel)):
    _mutate(channel, "delete event", records.delete_event, db, event_id)
    channel.publish("success", "Event deleted")
    return Response(status_code=204)


# ---------------------------------- stats -----------------------------------

@router.get("/stats", response_model=schemas.StatsOut)
def stats(db: Session = Depends(get_db)):
    s = records.stats(db)
    return schemas.StatsOut(
        projects=s["projects"],
        tokens=s["tokens"],
        holders=s["holders"],
        events=s["events"],
        recent_events=[schemas.EventOut.model_validate(e) for e in s["recent_events"]],
    )
