"""
Behavioural tests shared by every storage adapter.

The ``adapter`` fixture is parametrized over the in-memory document store, the
file-backed document store and the SQLite relational store.
"""

from datetime import date, datetime, timedelta

import pytest

from petcare_persistence.exceptions import InvalidArgument, SchemaValidationException
from petcare_persistence.schemas import (
    UNKNOWN_PET_NAME,
    AppointmentResponse,
    HealthRecordResponse,
    PetSchema,
    ProductResponse,
    ProductSchema,
)


def ids(records):
    return sorted(record.id for record in records)


class TestEmptyStore:
    """Reads against a store nobody has written to."""

    @pytest.mark.asyncio
    async def test_collections_start_empty(self, adapter):
        assert await adapter.get_pets() == []
        assert await adapter.get_products() == []
        assert await adapter.get_health_records() == []
        assert await adapter.get_appointments() == []

    @pytest.mark.asyncio
    async def test_missing_ids_return_none(self, adapter):
        assert await adapter.get_pet_by_id("missing") is None
        assert await adapter.get_product_by_id("missing") is None
        assert await adapter.get_health_record_by_id("missing") is None
        assert await adapter.get_appointment_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_by_pet_reads_return_empty_lists(self, adapter):
        assert await adapter.get_products_by_pet_id("missing") == []
        assert await adapter.get_health_records_by_pet_id("missing") == []
        assert await adapter.get_appointments_by_pet_id("missing") == []


class TestRoundTrip:
    """save(r) followed by get_by_id(r.id) returns r."""

    @pytest.mark.asyncio
    async def test_pet_round_trip(self, adapter, pet_factory):
        pet = pet_factory.build(notes="Loves the beach")

        saved = await adapter.save_pet(pet)
        loaded = await adapter.get_pet_by_id(pet.id)

        assert saved == pet
        assert loaded == pet

    @pytest.mark.asyncio
    async def test_product_round_trip(self, adapter, pet_factory, product_factory):
        pet = await adapter.save_pet(pet_factory.build())
        product = product_factory.build(pet_id=pet.id, notes="Apply monthly")

        saved = await adapter.save_product(product)
        loaded = await adapter.get_product_by_id(product.id)

        assert type(saved) is ProductSchema
        assert isinstance(loaded, ProductResponse)
        assert loaded.to_record() == product

    @pytest.mark.asyncio
    async def test_health_record_round_trip(
        self, adapter, pet_factory, health_record_factory
    ):
        pet = await adapter.save_pet(pet_factory.build())
        record = health_record_factory.build(pet.id)

        await adapter.save_health_record(record)
        loaded = await adapter.get_health_record_by_id(record.id)

        assert isinstance(loaded, HealthRecordResponse)
        assert loaded.to_record() == record

    @pytest.mark.asyncio
    async def test_appointment_round_trip(
        self, adapter, pet_factory, appointment_factory
    ):
        pet = await adapter.save_pet(pet_factory.build())
        appointment = appointment_factory.build(pet_id=pet.id, dose="2 pills")

        await adapter.save_appointment(appointment)
        loaded = await adapter.get_appointment_by_id(appointment.id)

        assert isinstance(loaded, AppointmentResponse)
        assert loaded.to_record() == appointment

    @pytest.mark.asyncio
    async def test_save_accepts_mapping(self, adapter):
        saved = await adapter.save_pet(
            {"id": "p1", "name": "Rex", "species": "Dog", "dob": "2020-05-01"}
        )

        assert isinstance(saved, PetSchema)
        assert saved.dob == date(2020, 5, 1)
        assert await adapter.get_pet_by_id("p1") == saved

    @pytest.mark.asyncio
    async def test_save_accepts_enriched_read(self, adapter, pet_factory, product_factory):
        pet = await adapter.save_pet(pet_factory.build())
        await adapter.save_product(product_factory.build(id="pr1", pet_id=pet.id))

        loaded = await adapter.get_product_by_id("pr1")
        loaded.notes = "Re-applied"
        saved = await adapter.save_product(loaded)

        assert type(saved) is ProductSchema
        assert saved.notes == "Re-applied"
        assert (await adapter.get_product_by_id("pr1")).notes == "Re-applied"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("time", ["14:30", "9:30", "14:30:00", "2pm", "manhã"])
    async def test_appointment_time_is_free_text(self, adapter, appointment_factory, time):
        await adapter.save_appointment(appointment_factory.build(id="a1", time=time))

        assert (await adapter.get_appointment_by_id("a1")).time == time

    @pytest.mark.asyncio
    async def test_future_date_of_birth(self, adapter, pet_factory):
        dob = date.today() + timedelta(days=1)
        pet = await adapter.save_pet(pet_factory.build(id="p1", dob=dob))

        assert (await adapter.get_pet_by_id("p1")) == pet
        assert pet.dob == dob

    @pytest.mark.asyncio
    async def test_expiry_before_application(self, adapter, product_factory):
        await adapter.save_product(
            product_factory.build(
                id="pr1", application_date="2024-06-01", expiry_date="2024-03-01"
            )
        )

        loaded = await adapter.get_product_by_id("pr1")
        assert loaded.application_date == date(2024, 6, 1)
        assert loaded.expiry_date == date(2024, 3, 1)


class TestUpsert:
    """Saving an existing id replaces the stored record."""

    @pytest.mark.asyncio
    async def test_second_save_replaces_every_field(self, adapter, pet_factory):
        await adapter.save_pet(pet_factory.build(id="p1", name="Rex", breed="Labrador"))
        await adapter.save_pet({"id": "p1", "name": "Max", "species": "Cat"})

        pets = await adapter.get_pets()

        assert len(pets) == 1
        assert pets[0].name == "Max"
        assert pets[0].species == "Cat"
        assert pets[0].breed is None
        assert pets[0].dob is None

    @pytest.mark.asyncio
    async def test_upsert_keeps_other_records(self, adapter, product_factory):
        await adapter.save_product(product_factory.build(id="a", name="Shampoo", type="Higiene"))
        await adapter.save_product(product_factory.build(id="b", name="Kibble", type="Alimento"))
        await adapter.save_product(product_factory.build(id="a", name="Soap", type="Higiene"))

        products = await adapter.get_products()

        assert ids(products) == ["a", "b"]
        assert {p.id: p.name for p in products} == {"a": "Soap", "b": "Kibble"}


class TestDelete:
    """Deletes are idempotent."""

    @pytest.mark.asyncio
    async def test_delete_twice(self, adapter, product_factory):
        await adapter.save_product(product_factory.build(id="pr1"))

        assert await adapter.delete_product("pr1") is True
        assert await adapter.get_product_by_id("pr1") is None
        assert await adapter.delete_product("pr1") is True
        assert await adapter.get_product_by_id("pr1") is None

    @pytest.mark.asyncio
    async def test_delete_absent_records(self, adapter):
        assert await adapter.delete_pet("nope") is True
        assert await adapter.delete_product("nope") is True
        assert await adapter.delete_health_record("nope") is True
        assert await adapter.delete_appointment("nope") is True

    @pytest.mark.asyncio
    async def test_delete_leaves_siblings(
        self, adapter, pet_factory, health_record_factory, appointment_factory
    ):
        pet = await adapter.save_pet(pet_factory.build())
        first = await adapter.save_health_record(health_record_factory.build(pet.id))
        second = await adapter.save_health_record(health_record_factory.build(pet.id))
        visit = await adapter.save_appointment(appointment_factory.build(pet_id=pet.id))

        await adapter.delete_health_record(first.id)
        await adapter.delete_appointment(visit.id)

        assert ids(await adapter.get_health_records()) == [second.id]
        assert await adapter.get_appointments() == []
        assert await adapter.get_pet_by_id(pet.id) is not None


class TestCascade:
    """Deleting a pet removes every record referencing it."""

    @pytest.mark.asyncio
    async def test_delete_pet_removes_dependents(
        self,
        adapter,
        pet_factory,
        product_factory,
        health_record_factory,
        appointment_factory,
    ):
        rex = await adapter.save_pet(pet_factory.build(name="Rex"))
        tom = await adapter.save_pet(pet_factory.build(name="Tom", species="Cat"))

        await adapter.save_product(product_factory.build(pet_id=rex.id))
        await adapter.save_health_record(health_record_factory.build(rex.id))
        await adapter.save_appointment(appointment_factory.build(pet_id=rex.id))

        kept_product = await adapter.save_product(product_factory.build(pet_id=tom.id))
        kept_record = await adapter.save_health_record(health_record_factory.build(tom.id))
        unlinked = await adapter.save_appointment(appointment_factory.build())

        assert await adapter.delete_pet(rex.id) is True

        assert ids(await adapter.get_pets()) == [tom.id]
        assert ids(await adapter.get_products()) == [kept_product.id]
        assert ids(await adapter.get_health_records()) == [kept_record.id]
        assert ids(await adapter.get_appointments()) == [unlinked.id]
        for collection in (
            await adapter.get_products(),
            await adapter.get_health_records(),
            await adapter.get_appointments(),
        ):
            assert all(record.pet_id != rex.id for record in collection)

    @pytest.mark.asyncio
    async def test_flea_drops_scenario(self, adapter):
        await adapter.save_pet({"id": "p1", "name": "Rex", "species": "Dog"})
        await adapter.save_product(
            {"id": "pr1", "name": "Flea drops", "type": "Medicamento", "pet_id": "p1"}
        )

        products = await adapter.get_products()
        assert [(p.id, p.pet_name) for p in products] == [("pr1", "Rex")]

        await adapter.delete_pet("p1")

        assert all(p.id != "pr1" for p in await adapter.get_products())


class TestEnrichment:
    """Dependent reads carry the referenced pet's name."""

    @pytest.mark.asyncio
    async def test_every_read_is_enriched(
        self,
        adapter,
        pet_factory,
        product_factory,
        health_record_factory,
        appointment_factory,
    ):
        pet = await adapter.save_pet(pet_factory.build(name="Rex"))
        product = await adapter.save_product(product_factory.build(pet_id=pet.id))
        record = await adapter.save_health_record(health_record_factory.build(pet.id))
        visit = await adapter.save_appointment(appointment_factory.build(pet_id=pet.id))

        reads = [
            *(await adapter.get_products()),
            await adapter.get_product_by_id(product.id),
            *(await adapter.get_products_by_pet_id(pet.id)),
            *(await adapter.get_health_records()),
            await adapter.get_health_record_by_id(record.id),
            *(await adapter.get_health_records_by_pet_id(pet.id)),
            *(await adapter.get_appointments()),
            await adapter.get_appointment_by_id(visit.id),
            *(await adapter.get_appointments_by_pet_id(pet.id)),
            *(await adapter.get_appointments_by_date_range(visit.date, visit.date)),
        ]

        assert len(reads) == 10
        assert {r.pet_name for r in reads} == {"Rex"}

    @pytest.mark.asyncio
    async def test_unlinked_records_use_placeholder(
        self, adapter, product_factory, appointment_factory
    ):
        await adapter.save_product(product_factory.build(id="pr1", pet_id=None))
        await adapter.save_appointment(appointment_factory.build(id="a1", pet_id=""))

        product = await adapter.get_product_by_id("pr1")
        appointment = await adapter.get_appointment_by_id("a1")

        assert product.pet_name == UNKNOWN_PET_NAME
        assert appointment.pet_id is None
        assert appointment.pet_name == UNKNOWN_PET_NAME

    @pytest.mark.asyncio
    async def test_rename_is_visible_on_next_read(self, adapter, pet_factory, product_factory):
        pet = await adapter.save_pet(pet_factory.build(id="p1", name="Rex"))
        await adapter.save_product(product_factory.build(id="pr1", pet_id=pet.id))

        await adapter.save_pet(pet_factory.build(id="p1", name="Rexy"))

        assert (await adapter.get_product_by_id("pr1")).pet_name == "Rexy"

    @pytest.mark.asyncio
    async def test_pet_name_is_not_stored(self, adapter, pet_factory, product_factory):
        pet = await adapter.save_pet(pet_factory.build())
        saved = await adapter.save_product(
            {**product_factory.build_data(pet_id=pet.id), "pet_name": "Bogus"}
        )

        assert not hasattr(saved, "pet_name")
        assert (await adapter.get_product_by_id(saved.id)).pet_name == pet.name


class TestDateRange:
    """get_appointments_by_date_range is inclusive at both ends."""

    @pytest.mark.asyncio
    async def test_boundaries_are_included(self, adapter, appointment_factory):
        for day in (9, 10, 15, 20, 21):
            await adapter.save_appointment(
                appointment_factory.build(id=f"a{day}", date=date(2024, 4, day))
            )

        found = await adapter.get_appointments_by_date_range(
            date(2024, 4, 10), date(2024, 4, 20)
        )

        assert ids(found) == ["a10", "a15", "a20"]

    @pytest.mark.asyncio
    async def test_single_day_range(self, adapter, appointment_factory):
        await adapter.save_appointment(appointment_factory.build(id="a1", date=date(2024, 4, 15)))

        found = await adapter.get_appointments_by_date_range("2024-04-15", "2024-04-15")

        assert ids(found) == ["a1"]

    @pytest.mark.asyncio
    async def test_datetimes_and_strings(self, adapter, appointment_factory):
        await adapter.save_appointment(appointment_factory.build(id="a1", date=date(2024, 4, 15)))

        found = await adapter.get_appointments_by_date_range(
            datetime(2024, 4, 15, 23, 59), "2024-04-16T08:00:00.000Z"
        )

        assert ids(found) == ["a1"]

    @pytest.mark.asyncio
    async def test_empty_window(self, adapter, appointment_factory):
        await adapter.save_appointment(appointment_factory.build(date=date(2024, 4, 15)))

        assert await adapter.get_appointments_by_date_range("2024-05-01", "2024-05-31") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "start,end",
        [
            (None, "2024-04-01"),
            ("2024-04-01", None),
            ("not-a-date", "2024-04-01"),
            ("2024-04-30", "2024-04-01"),
        ],
    )
    async def test_invalid_ranges(self, adapter, start, end):
        with pytest.raises(InvalidArgument):
            await adapter.get_appointments_by_date_range(start, end)


class TestArgumentErrors:
    """Bad ids and bad records fail with InvalidArgument."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_id", ["", "   ", None])
    async def test_empty_ids_are_rejected(self, adapter, bad_id):
        with pytest.raises(InvalidArgument):
            await adapter.get_pet_by_id(bad_id)
        with pytest.raises(InvalidArgument):
            await adapter.delete_pet(bad_id)
        with pytest.raises(InvalidArgument):
            await adapter.delete_product(bad_id)
        with pytest.raises(InvalidArgument):
            await adapter.get_health_record_by_id(bad_id)
        with pytest.raises(InvalidArgument):
            await adapter.get_appointments_by_pet_id(bad_id)

    @pytest.mark.asyncio
    async def test_padded_ids_are_stripped(self, adapter, pet_factory, product_factory):
        await adapter.save_pet(pet_factory.build(id=" p1 "))
        await adapter.save_product(product_factory.build(id="pr1", pet_id="p1"))

        assert (await adapter.get_pet_by_id(" p1 ")).id == "p1"
        assert ids(await adapter.get_products_by_pet_id("\tp1")) == ["pr1"]
        assert await adapter.delete_product(" pr1 ") is True
        assert await adapter.get_product_by_id("pr1") is None

    @pytest.mark.asyncio
    async def test_save_without_id(self, adapter):
        with pytest.raises(InvalidArgument) as exc_info:
            await adapter.save_pet({"name": "Rex", "species": "Dog"})

        assert exc_info.value.details["field"] == "id"
        assert not isinstance(exc_info.value, SchemaValidationException)

    @pytest.mark.asyncio
    async def test_save_with_blank_id(self, adapter):
        with pytest.raises(InvalidArgument):
            await adapter.save_appointment({"id": "", "type": "Check-up", "date": "2024-04-15"})

    @pytest.mark.asyncio
    async def test_save_non_record(self, adapter):
        with pytest.raises(InvalidArgument):
            await adapter.save_pet(None)

    @pytest.mark.asyncio
    async def test_schema_failure(self, adapter):
        with pytest.raises(SchemaValidationException) as exc_info:
            await adapter.save_product({"id": "pr1", "name": "Drops", "type": "Toy"})

        assert "type" in exc_info.value.details["validation_errors"]
        assert await adapter.get_products() == []

    @pytest.mark.asyncio
    async def test_dangling_reference_on_save(self, adapter, product_factory):
        with pytest.raises(InvalidArgument) as exc_info:
            await adapter.save_product(product_factory.build(pet_id="ghost"))

        assert exc_info.value.details["field"] == "pet_id"
        assert await adapter.get_products() == []

    @pytest.mark.asyncio
    async def test_health_record_requires_pet(self, adapter):
        with pytest.raises(SchemaValidationException):
            await adapter.save_health_record(
                {"id": "h1", "type": "Rabies vaccine", "date": "2024-03-10"}
            )
