import sys
import pathlib
sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

import sqlalchemy as sa
from modelbuilder.core.models.base import Base, metadata, NAMING_CONVENTION, make_base


def test_metadata_naming_convention():
    # Ensure the MetaData on Base has the right naming convention mapping
    assert metadata.naming_convention == NAMING_CONVENTION
    assert Base.metadata is metadata


def test_make_base_uses_isolated_metadata():
    fresh = make_base()
    assert fresh.metadata is not metadata
    assert fresh.metadata.naming_convention == NAMING_CONVENTION


def test_create_tables_in_memory_sqlite():
    """Metadata should be able to create/drop tables without error."""
    base = make_base()

    class Dummy(base):  # type: ignore[misc]
        __tablename__ = "dummy"
        id = sa.Column(sa.Integer, primary_key=True)
        name = sa.Column(sa.String, nullable=False, unique=True)

    engine = sa.create_engine("sqlite:///:memory:")
    base.metadata.create_all(engine)

    insp = sa.inspect(engine)
    assert "dummy" in insp.get_table_names()
    assert insp.get_pk_constraint("dummy")["name"] in (None, "pk_dummy")

    base.metadata.drop_all(engine)
    assert "dummy" not in sa.inspect(engine).get_table_names()
