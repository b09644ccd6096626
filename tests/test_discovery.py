"""Tests for bound field discovery."""

import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Annotated, Optional, Set

import pytest

from prefbind import ConfigurationError, Pref, Scope
from prefbind.discovery import FieldAccessor, field_name, find_bound_fields

if TYPE_CHECKING:
    from decimal import Decimal


class Plain:
    __module__ = "com.example.discovery"

    license: Annotated[str, Pref(Scope.SYSTEM, key="license", default="UNLICENSED")]
    last_dir: Annotated[Optional[str], Pref()] = None
    untouched: int = 5
    note: Annotated[str, "not a pref"] = ""
    __cache: Annotated[Set[str], Pref()]

    def __init__(self):
        self.__cache = {"a"}

    @property
    def cache(self):
        return self.__cache


class Counter:
    times_ran: "Annotated[int, Pref()]" = 0
    helper: "Optional[Decimal]" = None


class TestFindBoundFields:
    """Tests for find_bound_fields."""

    def test_only_marked_fields(self):
        """Unmarked and non-Pref annotated fields are skipped."""
        names = [f.name for f in find_bound_fields(Plain())]
        assert names == ["license", "last_dir", "cache"]

    def test_metadata_and_declared_type(self):
        """Each field carries its marker and declared type."""
        fields = {f.name: f for f in find_bound_fields(Plain())}

        license = fields["license"]
        assert license.scope is Scope.SYSTEM
        assert license.key == "license"
        assert license.default == "UNLICENSED"
        assert license.declared is str

        assert fields["last_dir"].declared == Optional[str]
        assert fields["cache"].declared == Set[str]

    def test_key_defaults_to_field_name(self):
        """A blank key falls back to the field name."""

        class Settings:
            a: Annotated[str, Pref()]
            b: Annotated[str, Pref(key="   ")]
            c: Annotated[str, Pref(key="custom")]

        keys = [f.key for f in find_bound_fields(Settings())]
        assert keys == ["a", "b", "custom"]

    def test_private_field_access(self):
        """Name-mangled private fields can be read and written."""
        obj = Plain()
        cache = {f.name: f for f in find_bound_fields(obj)}["cache"]

        assert cache.accessor.read() == {"a"}
        cache.accessor.write({"b"})
        assert obj.cache == {"b"}

    def test_unassigned_reads_none(self):
        """A field never assigned reads as None."""
        obj = Plain()
        license = {f.name: f for f in find_bound_fields(obj)}["license"]
        assert license.accessor.read() is None

    def test_inherited_fields_not_bound(self):
        """Only the concrete class's own declarations count."""

        class Base:
            parent_field: Annotated[str, Pref()] = "x"

        class Child(Base):
            child_field: Annotated[str, Pref()] = "y"

        assert [f.name for f in find_bound_fields(Child())] == ["child_field"]

    def test_string_annotations_evaluated(self):
        """Postponed annotations are evaluated."""

        class Settings:
            count: "Annotated[int, Pref()]" = 0

        fields = find_bound_fields(Settings())
        assert fields[0].declared is int

    def test_bad_string_annotation(self):
        """Annotations that can't be evaluated are a configuration error."""

        class Settings:
            count: "Annotated[Missing, Pref()]" = 0

        with pytest.raises(ConfigurationError):
            find_bound_fields(Settings())

    def test_unmarked_type_checking_annotation_skipped(self):
        """Unmarked annotations naming TYPE_CHECKING-only imports are ignored."""
        fields = find_bound_fields(Counter())
        assert [f.name for f in fields] == ["times_ran"]
        assert fields[0].declared is int

    @pytest.mark.skipif(sys.version_info < (3, 14), reason="deferred annotations")
    def test_unresolvable_deferred_annotation_skipped(self):
        """Deferred annotations that can't be resolved don't hide marked fields."""

        class Settings:
            times_ran: Annotated[int, Pref()] = 0
            helper: Optional[Decimal] = None

        assert [f.name for f in find_bound_fields(Settings())] == ["times_ran"]

    def test_underscore_field_keeps_its_name(self):
        """A single leading underscore is part of the key."""

        class Settings:
            cache: Annotated[str, Pref()] = ""
            _cache: Annotated[str, Pref()] = ""

        assert [f.key for f in find_bound_fields(Settings())] == ["cache", "_cache"]

    def test_duplicate_key_rejected(self):
        """Two fields can't bind the same key in the same scope."""

        class Settings:
            first: Annotated[str, Pref(key="shared")] = ""
            second: Annotated[str, Pref(key="shared")] = ""

        with pytest.raises(ConfigurationError, match="shared"):
            find_bound_fields(Settings())

    def test_demangled_name_collides_with_key(self):
        """A private field's key clashes with an explicit key of the same name."""

        class Settings:
            other: Annotated[str, Pref(key="token")] = ""
            __token: Annotated[str, Pref()] = ""

        with pytest.raises(ConfigurationError, match="token"):
            find_bound_fields(Settings())

    def test_same_key_in_both_scopes(self):
        """The same key may be used once per scope."""

        class Settings:
            mine: Annotated[str, Pref(key="license")] = ""
            site: Annotated[str, Pref(Scope.SYSTEM, key="license")] = ""

        assert len(find_bound_fields(Settings())) == 2


class TestFieldAccessor:
    """Tests for FieldAccessor."""

    def test_writes_frozen_dataclass(self):
        """Writes bypass frozen dataclass guards."""

        @dataclass(frozen=True)
        class Frozen:
            value: Annotated[int, Pref()] = 1

        obj = Frozen()
        FieldAccessor(obj, "value").write(7)
        assert obj.value == 7

    def test_no_lasting_change(self):
        """Normal assignment is still blocked after a bypassed write."""

        @dataclass(frozen=True)
        class Frozen:
            value: int = 1

        obj = Frozen()
        FieldAccessor(obj, "value").write(2)
        with pytest.raises(Exception):
            obj.value = 3


class TestFieldName:
    """Tests for field_name."""

    def test_demangle(self):
        """Mangled private names lose the class prefix."""

        class AppSettings:
            pass

        assert field_name(AppSettings, "_AppSettings__cache") == "cache"

    def test_unmangled_names_unchanged(self):
        """Names without the class's mangling prefix are kept as they are."""

        class AppSettings:
            pass

        assert field_name(AppSettings, "_cache") == "_cache"
        assert field_name(AppSettings, "_Other__cache") == "_Other__cache"
        assert field_name(AppSettings, "cache") == "cache"

    def test_class_with_leading_underscore(self):
        """Mangling drops the class name's leading underscores."""

        class _Hidden:
            pass

        assert field_name(_Hidden, "_Hidden__token") == "token"
