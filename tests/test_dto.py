"""Tests for DTO construction and property access."""

import copy
import pickle

import pytest

from flexible_dto import (
    BaseDTO,
    DataTransferObject,
    PropertyNotAllowed,
)


class DefaultDTO(DataTransferObject):
    allowed_properties = ["first_name", "last_name", "fullName", "age"]


class BlankDTO(DataTransferObject):
    allowed_properties = ["*"]


class IgnoreNonPermittedPropertiesDTO(DataTransferObject):
    allowed_properties = ["first_name", "last_name", "fullName", "age"]
    ignore_non_permitted_properties = True


class CaseInsensitiveDTO(DataTransferObject):
    allowed_properties = ["first_name", "lastName", "full name", "age"]
    case_sensitive = False


class TestConstruction:
    """Test the different ways of populating a DTO."""

    def test_from_mapping(self):
        """Test constructing a DTO from a dict."""
        dto = DefaultDTO({"first_name": "Luca", "last_name": "Brasi"})
        assert isinstance(dto, DataTransferObject)
        assert dto.first_name == "Luca"

    def test_make(self):
        """Test the make factory."""
        dto = DefaultDTO.make({"first_name": "Luca", "last_name": "Brasi"})
        assert isinstance(dto, DefaultDTO)
        assert dto.last_name == "Brasi"

    def test_from_dict(self):
        """Test from_dict accepts mappings only."""
        dto = DefaultDTO.from_dict({"age": 35})
        assert dto.age == 35

        with pytest.raises(TypeError, match="Expected mapping"):
            DefaultDTO.from_dict([("age", 35)])

    def test_from_key_value_pairs(self):
        """Test constructing a DTO from an iterable of pairs."""
        dto = DefaultDTO([("first_name", "Luca"), ("last_name", "Brasi")])
        assert dto.get_original() == {"first_name": "Luca", "last_name": "Brasi"}

    def test_from_positional_arguments(self):
        """Test positional values are matched in whitelist order."""
        dto = DefaultDTO("Luca", "Brasi", "Luca Brasi", 44)
        assert dto.get_all() == {
            "first_name": "Luca",
            "last_name": "Brasi",
            "fullName": "Luca Brasi",
            "age": 44,
        }

    def test_positional_arguments_are_truncated(self):
        """Test extra positional values are dropped and missing ones stay unset."""
        dto = DefaultDTO("Luca", "Brasi", "Luca Brasi", 44, "extra", "values")
        assert list(dto.get_original()) == ["first_name", "last_name", "fullName", "age"]

        dto = DefaultDTO("Luca")
        assert dto.get_all() == {
            "first_name": "Luca",
            "last_name": None,
            "fullName": None,
            "age": None,
        }
        assert not dto.has("last_name")

    def test_single_string_is_positional(self):
        """Test a lone string is a value, not an iterable of keys."""
        dto = DefaultDTO("Luca")
        assert dto.first_name == "Luca"

    def test_positional_arguments_need_a_whitelist(self):
        """Test wildcard DTOs reject positional values."""
        with pytest.raises(TypeError, match="matched by position"):
            BlankDTO("Luca", "Brasi")

    def test_iterable_items_must_be_pairs(self):
        """Test an iterable of scalars is rejected."""
        with pytest.raises(TypeError, match="key/value pairs"):
            DefaultDTO(["Luca", "Brasi"])

    def test_keyword_arguments(self):
        """Test keyword arguments are whitelisted like mapping keys."""
        dto = DefaultDTO(first_name="Luca", age=35)
        assert dto.get_all() == {
            "first_name": "Luca",
            "last_name": None,
            "fullName": None,
            "age": 35,
        }

        dto = DefaultDTO("Luca", age=44)
        assert dto.age == 44

        with pytest.raises(PropertyNotAllowed):
            DefaultDTO(middle_name="Carlo")

    def test_keyword_argument_duplicates_positional(self):
        """Test a keyword may not refill a positional value."""
        with pytest.raises(TypeError, match="Duplicate value for property 'first_name'"):
            DefaultDTO("Luca", first_name="Carlo")

    def test_keyword_argument_duplicates_mapping_key(self):
        """Test a keyword may not refill a mapping key either."""
        with pytest.raises(TypeError, match="Duplicate value for property 'first_name'"):
            DefaultDTO({"first_name": "Luca"}, first_name="Carlo")

        dto = DefaultDTO({"first_name": "Luca"}, age=35)
        assert dto.get_original() == {"first_name": "Luca", "age": 35}

    def test_no_input(self):
        """Test an empty DTO."""
        dto = DefaultDTO()
        assert dto.get_original() == {}
        assert dto.get_all() == dict.fromkeys(["first_name", "last_name", "fullName", "age"])

    def test_none_input(self):
        """Test a lone None builds an empty DTO."""
        dto = DefaultDTO(None)
        assert dto.get_original() == {}
        assert not dto.has("first_name")
        assert BlankDTO(None).get_all() == {}

    def test_later_keys_overwrite_earlier_ones(self):
        """Test two spellings of one property keep the last value."""
        dto = CaseInsensitiveDTO({"firstName": "Luca", "first_name": "Carlo"})
        assert dto.first_name == "Carlo"


class TestWhitelist:
    """Test property whitelisting."""

    def test_rejects_non_permitted_property(self):
        """Test an unknown key fails construction."""
        with pytest.raises(PropertyNotAllowed) as exc_info:
            DefaultDTO({"middle_name": "Bruiser"})

        assert str(exc_info.value) == "middle_name is not an allowed property."
        assert exc_info.value.name == "middle_name"

    def test_property_not_allowed_is_a_value_error(self):
        """Test the error can be caught as an invalid argument."""
        with pytest.raises(ValueError):
            DefaultDTO({"middle_name": "Bruiser"})

    def test_case_sensitive_by_default(self):
        """Test other spellings are rejected when case sensitive."""
        with pytest.raises(PropertyNotAllowed, match="firstName"):
            DefaultDTO({"firstName": "Luca"})

    def test_ignores_non_permitted_properties(self):
        """Test unknown keys are skipped when configured."""
        allowed = {
            "first_name": "Luca",
            "last_name": "Brasi",
            "fullName": "Luca Brasi",
            "age": 35,
        }
        dto = IgnoreNonPermittedPropertiesDTO({**allowed, "middle_name": "Carlo"})

        assert dto.get_all() == allowed
        assert not dto.has("middle_name")
        assert "middle_name" not in dto.get_original()

    def test_accepts_case_insensitive_properties(self):
        """Test input keys are stored under the whitelist spelling."""
        dto = CaseInsensitiveDTO(
            {
                "firstName": "Luca",
                "last_name": "Brasi",
                "full_name": "Luca Brasi",
                "AGE": 35,
            }
        )
        assert dto.get_all() == {
            "first_name": "Luca",
            "lastName": "Brasi",
            "full name": "Luca Brasi",
            "age": 35,
        }

    def test_wildcard_accepts_anything(self):
        """Test a wildcard DTO stores every key verbatim."""
        data = {
            "first_name": "Luca",
            "last_name": "Brasi",
            "fullName": "Luca Brasi",
            "age": 35,
        }
        dto = BlankDTO(data)
        assert dto.get_all() == data
        assert list(dto.get_all()) == list(data)

    def test_default_whitelist_is_wildcard(self):
        """Test BaseDTO allows any property."""
        dto = BaseDTO({"anything": 1})
        assert dto.anything == 1
        assert BaseDTO.get_config().allows_all_properties


class TestAccessors:
    """Test generic accessors."""

    def test_get_all_returns_unset_properties_as_none(self):
        """Test unset whitelisted properties read as None."""
        dto = DefaultDTO({"first_name": "Luca", "last_name": "Brasi"})
        assert dto.get_all() == {
            "first_name": "Luca",
            "last_name": "Brasi",
            "fullName": None,
            "age": None,
        }

    def test_get_all_follows_whitelist_order(self):
        """Test get_all orders properties as declared."""
        dto = DefaultDTO({"age": 35, "first_name": "Luca"})
        assert list(dto.get_all()) == ["first_name", "last_name", "fullName", "age"]

    def test_get_all_exclude_empty(self):
        """Test empty values can be left out."""
        dto = DefaultDTO({"first_name": "Luca", "last_name": "", "age": 0})
        assert dto.get_all(exclude_empty=True) == {"first_name": "Luca", "age": 0}

    def test_get_data_and_to_dict_are_aliases(self):
        """Test get_data and to_dict match get_all."""
        dto = DefaultDTO({"first_name": "Luca"})
        assert dto.get_data() == dto.get_all() == dto.to_dict()

    def test_get_populated(self):
        """Test only populated properties are returned."""
        dto = DefaultDTO({"first_name": "Luca"})
        assert dto.get_populated() == {"first_name": "Luca"}

    def test_get_original_for_positional_input(self):
        """Test the raw store is keyed by property name."""
        dto = DefaultDTO("Luca", "Brasi")
        assert dto.get_original() == {"first_name": "Luca", "last_name": "Brasi"}
        assert dto.get_raw() == dto.get_original()

    def test_has(self):
        """Test has only reports populated properties."""
        dto = DefaultDTO({"first_name": "Luca", "last_name": "Brasi"})
        assert dto.has("first_name")
        assert dto.has("firstName")
        assert not dto.has("age")
        assert not dto.has("middle_name")
        assert "first_name" in dto
        assert "age" not in dto

    def test_get_with_default(self):
        """Test get falls back to the default."""
        dto = DefaultDTO({"first_name": "Luca"})
        assert dto.get("first_name") == "Luca"
        assert dto.get("last_name") is None
        assert dto.get("last_name", "Brasi") == "Brasi"
        assert dto.get("middle_name", "Carlo") == "Carlo"

    def test_get_with_default_on_wildcard(self):
        """Test get on a wildcard DTO."""
        dto = BlankDTO({"first_name": "Luca"})
        assert dto.get("last_name") is None
        assert dto.get("last_name", "Brasi") == "Brasi"

    def test_mapping_protocol(self):
        """Test a DTO unpacks like a read-only mapping."""
        dto = DefaultDTO({"first_name": "Luca", "age": 35})
        assert list(dto) == ["first_name", "last_name", "fullName", "age"]
        assert dict(dto) == dto.get_all()

        wildcard = BlankDTO({"first_name": "Luca"})
        assert list(wildcard) == ["first_name"]
        assert BlankDTO(wildcard).get_original() == {"first_name": "Luca"}


class TestDynamicAccess:
    """Test attribute, item and getter access."""

    def test_matching_property_name(self):
        dto = DefaultDTO({"first_name": "Luca"})
        assert dto.first_name == "Luca"

    def test_camel_case_property_name(self):
        dto = DefaultDTO({"first_name": "Luca"})
        assert dto.firstName == "Luca"

    def test_snake_case_property_name(self):
        dto = DefaultDTO({"fullName": "Luca Brasi"})
        assert dto.full_name == "Luca Brasi"

    def test_getter_methods(self):
        """Test both getter spellings."""
        dto = DefaultDTO({"first_name": "Luca"})
        assert dto.getFirstName() == "Luca"
        assert dto.get_first_name() == "Luca"

    def test_item_access(self):
        dto = DefaultDTO({"first_name": "Luca"})
        assert dto["firstName"] == "Luca"
        assert dto["age"] is None

        with pytest.raises(PropertyNotAllowed):
            dto["middle_name"]

    def test_unset_properties_read_as_none(self):
        """Test every access form returns None for unset properties."""
        dto = DefaultDTO({"first_name": "Luca"})
        assert dto.age is None
        assert dto.get_age() is None
        assert dto.getAge() is None
        assert dto.lastName is None

    def test_case_insensitive_equivalence(self):
        """Test every spelling resolves to the same stored value."""
        dto = CaseInsensitiveDTO({"firstName": "Luca", "full_name": "Luca Brasi"})
        assert dto.first_name == "Luca"
        assert dto.firstName == "Luca"
        assert dto.FirstName == "Luca"
        assert dto.getFirstName() == "Luca"
        assert dto.full_name == "Luca Brasi"
        assert dto.get_full_name() == "Luca Brasi"

    def test_unknown_property(self):
        """Test unknown names fail on whitelisted DTOs."""
        dto = DefaultDTO({"first_name": "Luca"})

        with pytest.raises(PropertyNotAllowed) as exc_info:
            dto.middle_name
        assert str(exc_info.value) == "middle_name is not a valid property."

        with pytest.raises(PropertyNotAllowed):
            dto.getMiddleName()

        assert not hasattr(dto, "middle_name")

    def test_unknown_property_on_wildcard(self):
        """Test unknown names read as None on wildcard DTOs."""
        dto = BlankDTO({"first_name": "Luca"})
        assert dto.middle_name is None
        assert dto.getMiddleName() is None
        assert dto.getFirstName() == "Luca"

    def test_defined_methods_take_precedence(self):
        """Test a DTO can define its own computed accessors."""

        class PersonDTO(DataTransferObject):
            allowed_properties = ["first_name", "last_name"]

            def full_name(self):
                return f"{self.first_name} {self.last_name}"

        dto = PersonDTO("Luca", "Brasi")
        assert dto.full_name() == "Luca Brasi"

    def test_configuration_does_not_shadow_properties(self):
        """Test properties may share names with configuration attributes."""

        class SettingsDTO(DataTransferObject):
            allowed_properties = ["casts", "rules", "messages"]

        dto = SettingsDTO("cast list", "rule list", "message list")
        assert dto.casts == "cast list"
        assert dto.rules == "rule list"
        assert dto.messages == "message list"


class TestImmutability:
    """Test DTO instances are read-only."""

    def test_assignment_fails(self):
        dto = DefaultDTO({"first_name": "Luca"})

        with pytest.raises(AttributeError, match="read-only"):
            dto.first_name = "Carlo"

        with pytest.raises(AttributeError, match="read-only"):
            del dto.first_name

        assert dto.first_name == "Luca"

    def test_replace(self):
        """Test replace builds a new instance."""
        dto = DefaultDTO({"first_name": "Luca", "age": 35})
        older = dto.replace(age=36, lastName="Brasi")

        assert older.age == 36
        assert older.last_name == "Brasi"
        assert dto.age == 35
        assert dto.last_name is None

    def test_replace_rejects_unknown_properties(self):
        dto = DefaultDTO({"first_name": "Luca"})
        with pytest.raises(PropertyNotAllowed):
            dto.replace(middle_name="Carlo")

    def test_equality(self):
        assert DefaultDTO("Luca", "Brasi") == DefaultDTO({"first_name": "Luca", "last_name": "Brasi"})
        assert DefaultDTO("Luca") != DefaultDTO("Carlo")
        assert DefaultDTO("Luca") != IgnoreNonPermittedPropertiesDTO("Luca")

    def test_copy_and_pickle(self):
        """Test copies are rebuilt through the constructor."""
        dto = DefaultDTO({"first_name": "Luca", "age": 35})
        assert copy.copy(dto) == dto
        assert copy.deepcopy(dto) == dto
        assert pickle.loads(pickle.dumps(dto)) == dto

    def test_repr(self):
        dto = DefaultDTO({"first_name": "Luca", "age": 35})
        assert repr(dto) == "DefaultDTO(first_name='Luca', age=35)"


class TestConfiguration:
    """Test per-type configuration."""

    def test_config_is_collected(self):
        config = CaseInsensitiveDTO.get_config()
        assert config.allowed_properties == ("first_name", "lastName", "full name", "age")
        assert config.case_sensitive is False
        assert config.ignore_non_permitted_properties is False

    def test_config_is_inherited(self):
        """Test subclasses override only what they declare."""

        class LenientDTO(CaseInsensitiveDTO):
            ignore_non_permitted_properties = True
            casts = {"age": "integer"}

        config = LenientDTO.get_config()
        assert config.allowed_properties == CaseInsensitiveDTO.get_config().allowed_properties
        assert config.case_sensitive is False
        assert config.ignore_non_permitted_properties is True

        dto = LenientDTO({"FirstName": "Luca", "age": "35", "middle_name": "Carlo"})
        assert dto.first_name == "Luca"
        assert dto.age == 35
        assert CaseInsensitiveDTO.get_config().casts == {}

    def test_config_is_read_only(self):
        config = DefaultDTO.get_config()
        with pytest.raises(TypeError):
            config.casts["age"] = "integer"

    def test_cast_for_unknown_property(self):
        """Test casts must name whitelisted properties."""
        with pytest.raises(NameError, match="Cast for non-existent property 'middle_name'"):

            class BrokenDTO(DataTransferObject):
                allowed_properties = ["first_name"]
                casts = {"middle_name": "string"}

    def test_unknown_cast_type(self):
        with pytest.raises(TypeError, match="Unknown cast type"):

            class BrokenDTO(DataTransferObject):
                allowed_properties = ["first_name"]
                casts = {"first_name": "uppercase"}

    def test_empty_whitelist(self):
        with pytest.raises(TypeError, match="non-empty list of strings"):

            class BrokenDTO(DataTransferObject):
                allowed_properties = []
