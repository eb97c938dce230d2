import sys
import pathlib
sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

import pytest
import sqlalchemy as sa
from sqlalchemy.orm import Session

from modelbuilder import Lifecycle, LifecycleAbortedError, MalformedArgumentError, PendingContinuationError, create_builder
from modelbuilder.core.models import build_table, declare_model, make_base, run_lifecycle
from modelbuilder.settings import Settings


def _create_engine() -> sa.Engine:
    return sa.create_engine("sqlite:///:memory:")


def _user_builder():
    return (
        create_builder(settings=Settings())
        .int_key()
        .attr({"email": {"type": "string", "maxLength": 120, "unique": True}})
        .attr(["password", "nickname"], {"type": "string"})
        .attr("active", "type", "boolean")
        .attr("active", "defaultsTo", True)
        .mark_required("email", "password")
    )


def test_build_table_maps_attribute_properties():
    builder = _user_builder().attr({"greet": lambda self: "hi"})
    table = build_table("users", builder.model, sa.MetaData())

    assert [c.name for c in table.columns] == ["id", "email", "password", "nickname", "active"]
    assert table.c.id.primary_key and table.c.id.autoincrement is True
    assert table.c.email.type.length == 120
    assert table.c.email.unique and not table.c.email.nullable
    assert table.c.nickname.nullable
    assert table.c.active.default.arg is True


def test_build_table_rejects_unknown_types_and_empty_models():
    with pytest.raises(MalformedArgumentError):
        build_table("t", {"attributes": {"blob": {"type": "binary"}}}, sa.MetaData())
    with pytest.raises(MalformedArgumentError):
        build_table("t", {"attributes": {"greet": lambda self: "hi"}}, sa.MetaData())


def test_lifecycles_follow_insert_update_delete():
    builder = _user_builder()
    seen = []
    for lifecycle in Lifecycle:
        builder.on(lifecycle, lambda instance, cb, assume, name=lifecycle.value: seen.append(name))

    User = declare_model("User", builder.model, base=make_base())
    engine = _create_engine()
    User.metadata.create_all(engine)

    with Session(engine) as session:
        user = User(email="ada@example.com", password="secret")
        session.add(user)
        session.commit()
        assert seen == ["beforeValidate", "afterValidate", "beforeCreate", "afterCreate"]
        assert user.id is not None
        assert user.active is True

        seen.clear()
        user.nickname = "ada"
        session.commit()
        assert seen == ["beforeValidate", "afterValidate", "beforeUpdate", "afterUpdate"]

        seen.clear()
        session.delete(user)
        session.commit()
        assert seen == ["beforeDestroy", "afterDestroy"]


def test_handlers_can_mutate_instance_before_insert():
    def hash_password(instance, cb, assume):
        instance.password = "hashed:" + instance.password
        cb()

    builder = _user_builder().before_create(hash_password)
    User = declare_model("User", builder.model, base=make_base())
    engine = _create_engine()
    User.metadata.create_all(engine)

    with Session(engine) as session:
        session.add(User(email="a@b.c", password="pw"))
        session.commit()

        stored = session.execute(sa.select(User)).scalar_one()
        assert stored.password == "hashed:pw"


def test_uuid_key_generates_identifier_on_insert():
    builder = create_builder(settings=Settings()).uuid_key().attr("name", "type", "string")
    Tag = declare_model("Tag", builder.model, base=make_base())
    engine = _create_engine()
    Tag.metadata.create_all(engine)

    with Session(engine) as session:
        first, second = Tag(name="a"), Tag(name="b")
        session.add_all([first, second])
        session.commit()
        assert len(first.id) == 36
        assert first.id != second.id


def test_callable_attributes_become_methods():
    builder = _user_builder().attr({"display": lambda self: f"<{self.email}>"})
    User = declare_model("User", builder.model, base=make_base(), table_name="people")

    assert User.__table__.name == "people"
    assert User(email="x@y.z", password="p").display() == "<x@y.z>"


def test_error_passed_to_continuation_aborts_flush():
    def reject(instance, cb, assume):
        cb(ValueError("email is blacklisted"))

    builder = _user_builder().before_validate(reject)
    User = declare_model("User", builder.model, base=make_base())
    engine = _create_engine()
    User.metadata.create_all(engine)

    with Session(engine) as session:
        session.add(User(email="spam@example.com", password="pw"))
        with pytest.raises(LifecycleAbortedError) as exc_info:
            session.commit()
        assert exc_info.value.lifecycle == "beforeValidate"
        assert isinstance(exc_info.value.reason, ValueError)
        session.rollback()
        assert session.execute(sa.select(sa.func.count()).select_from(User)).scalar_one() == 0


def test_unfinished_adoption_raises_pending_error():
    builder = _user_builder().before_create(lambda instance, cb, assume: assume())
    User = declare_model("User", builder.model, base=make_base())
    engine = _create_engine()
    User.metadata.create_all(engine)

    with Session(engine) as session:
        session.add(User(email="a@b.c", password="pw"))
        with pytest.raises(PendingContinuationError):
            session.commit()


def test_run_lifecycle_without_trampoline_is_noop():
    # Descriptors that were never wired simply skip the lifecycle
    run_lifecycle({"attributes": {}}, Lifecycle.BEFORE_CREATE, object())
