import unittest
import uuid
from unittest import mock

from sqlalchemy import select

from teryt_registry.db.models import Building
from teryt_registry.domains.buildings.repositories import BuildingRepository
from teryt_registry.domains.providers.repositories import ProviderRepository
from teryt_registry.services.buildings.building_service import BuildingService
from teryt_registry.shared.errors import (
    Conflict,
    Forbidden,
    HierarchyError,
    NonFiniteCoordinate,
    NotFound,
    OutOfRange,
    PageOutOfRange,
    Unauthorized,
    UnresolvedReference,
    ValidationError,
)
from tests.support import (
    ADMIN,
    DZIELNICA,
    GMI,
    POW,
    POW_2,
    READER,
    SIMC,
    SIMC_2,
    ULICA,
    WOJ,
    WRITER,
    building_cmd,
    make_session_factory,
    seed_provider,
    seed_teryt,
)


class _BuildingServiceCase(unittest.TestCase):
    def setUp(self):
        self.Session = make_session_factory()
        self.db = self.Session()
        seed_teryt(self.db)
        self.provider_id = seed_provider(self.db)
        self.svc = BuildingService(self.db)

    def tearDown(self):
        self.db.close()

    def _count(self):
        return len(self.db.execute(select(Building.id)).all())


class CreateBuildingTests(_BuildingServiceCase):
    def test_create_persists_and_stamps(self):
        b = self.svc.create(building_cmd(self.provider_id), WRITER)
        self.assertIsInstance(b.id, uuid.UUID)
        self.assertEqual(b.status, "active")
        self.assertEqual(b.created_by, "writer-1")
        self.assertEqual(b.updated_by, "writer-1")
        self.assertIsNotNone(b.created_at)
        self.assertEqual(b.city_name, "Warszawa")
        self.assertEqual(b.street_name, "ul. Puławska")
        self.assertEqual(b.city_district_name, "Mokotów")
        self.assertEqual(b.provider.name, "Orange")

    def test_round_trip_is_exact(self):
        cmd = building_cmd(
            self.provider_id,
            building_number="7/9 b",
            location={"type": "Point", "coordinates": [21.012345678901234, 52.229676543210987]},
        )
        created = self.svc.create(cmd, WRITER)

        other = self.Session()
        try:
            again = BuildingService(other).get_by_id(created.id, READER)
            self.assertEqual(again.voivodeship_code, WOJ)
            self.assertEqual(again.district_code, POW)
            self.assertEqual(again.community_code, GMI)
            self.assertEqual(again.city_code, SIMC)
            self.assertEqual(again.city_district_code, DZIELNICA)
            self.assertEqual(again.street_code, ULICA)
            self.assertEqual(again.building_number, "7/9 b")
            self.assertEqual(again.location, (21.012345678901234, 52.229676543210987))
        finally:
            other.close()

    def test_optional_levels_may_be_absent(self):
        b = self.svc.create(building_cmd(self.provider_id, city_district_code=None, street_code="", post_code=None), WRITER)
        self.assertIsNone(b.street_code)
        self.assertIsNone(b.street_name)
        self.assertIsNone(b.city_district_code)

    def test_duplicate_address_is_conflict_regardless_of_other_fields(self):
        self.svc.create(building_cmd(self.provider_id), WRITER)
        other_provider = seed_provider(self.db, name="Netia")
        with self.assertRaises(Conflict):
            self.svc.create(
                building_cmd(
                    other_provider,
                    post_code="00-001",
                    location={"type": "Point", "coordinates": [21.1, 52.1]},
                ),
                ADMIN,
            )
        self.assertEqual(self._count(), 1)

    def test_building_number_case_and_outer_spaces_collide(self):
        self.svc.create(building_cmd(self.provider_id, building_number="12A"), WRITER)
        for variant in ("12a", " 12A ", "\t12a"):
            with self.assertRaises(Conflict):
                self.svc.create(building_cmd(self.provider_id, building_number=variant), WRITER)

    def test_separators_make_distinct_building_numbers(self):
        self.svc.create(building_cmd(self.provider_id, building_number="1-3"), WRITER)
        self.svc.create(building_cmd(self.provider_id, building_number="13"), WRITER)
        self.svc.create(building_cmd(self.provider_id, building_number="1 3"), WRITER)
        self.assertEqual(self._count(), 3)

    def test_unique_index_race_is_same_conflict(self):
        self.svc.create(building_cmd(self.provider_id), WRITER)
        with mock.patch.object(BuildingRepository, "exists_unique", return_value=False):
            with self.assertRaises(Conflict) as ctx:
                self.svc.create(building_cmd(self.provider_id, building_number="12a"), ADMIN)
        self.assertEqual(ctx.exception.details["field"], "building_number")
        self.assertEqual(self._count(), 1)

    def test_provider_gone_before_insert_is_unresolved_reference(self):
        with mock.patch.object(ProviderRepository, "exists", return_value=True):
            with self.assertRaises(UnresolvedReference) as ctx:
                self.svc.create(building_cmd(987654), WRITER)
        self.assertEqual(ctx.exception.details["field"], "provider_id")
        self.assertEqual(self._count(), 0)

    def test_no_street_address_is_unique_too(self):
        self.svc.create(building_cmd(self.provider_id, street_code=None, city_district_code=None), WRITER)
        with self.assertRaises(Conflict):
            self.svc.create(building_cmd(self.provider_id, street_code=None, city_district_code=None), WRITER)
        # ten sam numer, ale z ulicą: inny adres
        self.svc.create(building_cmd(self.provider_id), WRITER)

    def test_read_role_is_forbidden_and_nothing_is_written(self):
        with self.assertRaises(Forbidden):
            self.svc.create(building_cmd(self.provider_id), READER)
        self.assertEqual(self._count(), 0)

    def test_no_principal_is_unauthorized(self):
        with self.assertRaises(Unauthorized):
            self.svc.create(building_cmd(self.provider_id), None)

    def test_role_checked_before_shape(self):
        with self.assertRaises(Unauthorized):
            self.svc.create({"garbage": True}, None)

    def test_structural_errors_name_the_field(self):
        cases = {
            "building_number": building_cmd(self.provider_id, building_number="   "),
            "district_code": building_cmd(self.provider_id, district_code="14-65"),
            "provider_id": building_cmd(self.provider_id, provider_id="1"),
            "post_code": building_cmd(self.provider_id, post_code="02512"),
            "location.coordinates": building_cmd(self.provider_id, location={"type": "Point", "coordinates": [21.0]}),
        }
        for field, cmd in cases.items():
            with self.subTest(field=field):
                with self.assertRaises(ValidationError) as ctx:
                    self.svc.create(cmd, WRITER)
                self.assertEqual(ctx.exception.details["field"], field)

    def test_missing_required_field(self):
        cmd = building_cmd(self.provider_id)
        del cmd["city_code"]
        with self.assertRaises(ValidationError) as ctx:
            self.svc.create(cmd, WRITER)
        self.assertEqual(ctx.exception.details["field"], "city_code")

    def test_broken_chain_reports_level(self):
        with self.assertRaises(HierarchyError) as ctx:
            self.svc.create(building_cmd(self.provider_id, district_code=POW_2), WRITER)
        self.assertEqual(ctx.exception.level, "district")
        self.assertEqual(ctx.exception.http_status, 404)

    def test_hierarchy_checked_before_bounds(self):
        cmd = building_cmd(
            self.provider_id,
            city_code=SIMC_2,
            location={"type": "Point", "coordinates": [30.0, 60.0]},
        )
        with self.assertRaises(HierarchyError):
            self.svc.create(cmd, WRITER)

    def test_out_of_range_coordinates(self):
        with self.assertRaises(OutOfRange) as ctx:
            self.svc.create(building_cmd(self.provider_id, location={"type": "Point", "coordinates": [21.0, 55.0]}), WRITER)
        self.assertEqual(ctx.exception.details["field"], "latitude")

        with self.assertRaises(OutOfRange) as ctx:
            self.svc.create(building_cmd(self.provider_id, location={"type": "Point", "coordinates": [25.0, 52.0]}), WRITER)
        self.assertEqual(ctx.exception.details["field"], "longitude")

    def test_swapped_coordinates_are_rejected(self):
        with self.assertRaises(OutOfRange):
            self.svc.create(
                building_cmd(self.provider_id, location={"type": "Point", "coordinates": [52.2297, 21.0122]}),
                WRITER,
            )

    def test_non_finite_coordinates(self):
        with self.assertRaises(NonFiniteCoordinate):
            self.svc.create(
                building_cmd(self.provider_id, location={"type": "Point", "coordinates": [float("nan"), 52.0]}),
                WRITER,
            )

    def test_unknown_provider_is_unresolved_reference(self):
        with self.assertRaises(UnresolvedReference) as ctx:
            self.svc.create(building_cmd(9999), WRITER)
        self.assertEqual(ctx.exception.details["field"], "provider_id")
        self.assertNotIsInstance(ctx.exception, HierarchyError)


class UpdateBuildingTests(_BuildingServiceCase):
    def setUp(self):
        super().setUp()
        self.b = self.svc.create(building_cmd(self.provider_id), WRITER)

    def test_update_replaces_fields_and_stamps_updater(self):
        out = self.svc.update(
            self.b.id,
            building_cmd(self.provider_id, building_number="14", post_code=None, street_code=None, city_district_code=None),
            ADMIN,
        )
        self.assertEqual(out.building_number, "14")
        self.assertIsNone(out.post_code)
        self.assertIsNone(out.street_code)
        self.assertEqual(out.created_by, "writer-1")
        self.assertEqual(out.updated_by, "admin-1")

    def test_update_with_own_address_is_not_conflict(self):
        out = self.svc.update(self.b.id, building_cmd(self.provider_id, post_code="02-999"), WRITER)
        self.assertEqual(out.post_code, "02-999")

    def test_update_into_taken_address_is_conflict(self):
        other = self.svc.create(building_cmd(self.provider_id, building_number="99"), WRITER)
        with self.assertRaises(Conflict):
            self.svc.update(other.id, building_cmd(self.provider_id, building_number="12a"), WRITER)
        self.db.expire_all()
        self.assertEqual(self.db.get(Building, other.id).building_number, "99")

    def test_unknown_id_is_not_found(self):
        with self.assertRaises(NotFound):
            self.svc.update(uuid.uuid4(), building_cmd(self.provider_id), WRITER)
        with self.assertRaises(NotFound):
            self.svc.update("not-a-uuid", building_cmd(self.provider_id), WRITER)

    def test_deleted_building_cannot_be_updated(self):
        self.svc.delete(self.b.id, ADMIN)
        with self.assertRaises(NotFound):
            self.svc.update(self.b.id, building_cmd(self.provider_id), WRITER)

    def test_failed_update_leaves_row_untouched(self):
        with self.assertRaises(OutOfRange):
            self.svc.update(
                self.b.id,
                building_cmd(self.provider_id, building_number="1", location={"type": "Point", "coordinates": [21.0, 10.0]}),
                WRITER,
            )
        self.db.expire_all()
        self.assertEqual(self.db.get(Building, self.b.id).building_number, "12A")


class DeleteBuildingTests(_BuildingServiceCase):
    def setUp(self):
        super().setUp()
        self.b = self.svc.create(building_cmd(self.provider_id), WRITER)

    def test_delete_is_admin_only(self):
        with self.assertRaises(Forbidden):
            self.svc.delete(self.b.id, WRITER)
        with self.assertRaises(Unauthorized):
            self.svc.delete(self.b.id, None)

    def test_first_delete_is_soft_and_frees_the_address(self):
        self.svc.delete(self.b.id, ADMIN)
        self.db.expire_all()
        row = self.db.get(Building, self.b.id)
        self.assertEqual(row.status, "deleted")
        self.assertEqual(row.updated_by, "admin-1")
        again = self.svc.create(building_cmd(self.provider_id), WRITER)
        self.assertNotEqual(again.id, self.b.id)

    def test_second_delete_purges(self):
        bid = self.b.id
        self.svc.delete(bid, ADMIN)
        self.svc.delete(bid, ADMIN)
        self.db.expire_all()
        self.assertIsNone(self.db.get(Building, bid))
        with self.assertRaises(NotFound):
            self.svc.delete(bid, ADMIN)


class ListBuildingTests(_BuildingServiceCase):
    def setUp(self):
        super().setUp()
        for n in range(15):
            self.svc.create(building_cmd(self.provider_id, building_number=str(n + 1)), WRITER)

    def test_first_page(self):
        page = self.svc.list(READER, {"page": 1, "pageSize": 10})
        self.assertEqual(page.total, 15)
        self.assertEqual(len(page.items), 10)
        self.assertEqual(page.page_size, 10)

    def test_last_page_has_remainder(self):
        page = self.svc.list(READER, {"page": "2", "pageSize": "10"})
        self.assertEqual(len(page.items), 5)

    def test_page_beyond_last_is_page_out_of_range(self):
        with self.assertRaises(PageOutOfRange):
            self.svc.list(READER, {"page": 1000, "pageSize": 10})

    def test_empty_filter_result_is_page_one_with_no_rows(self):
        page = self.svc.list(READER, {"city_code": SIMC_2})
        self.assertEqual(page.total, 0)
        self.assertEqual(page.items, [])
        self.assertEqual(page.page, 1)

    def test_filters_are_conjunctive(self):
        other = seed_provider(self.db, name="Netia")
        self.svc.create(building_cmd(other, building_number="100"), WRITER)
        page = self.svc.list(READER, {"city_code": SIMC, "provider_id": str(other)})
        self.assertEqual(page.total, 1)
        self.assertEqual(page.items[0].building_number, "100")
        self.assertEqual(self.svc.list(READER, {"city_code": SIMC}).total, 16)

    def test_page_size_over_limit_is_validation_error(self):
        with self.assertRaises(ValidationError) as ctx:
            self.svc.list(READER, {"pageSize": 101})
        self.assertEqual(ctx.exception.details["field"], "pageSize")

    def test_malformed_filter_is_validation_error(self):
        with self.assertRaises(ValidationError):
            self.svc.list(READER, {"city_code": "abc"})

    def test_unknown_filter_code_is_unresolved(self):
        with self.assertRaises(UnresolvedReference) as ctx:
            self.svc.list(READER, {"voivodeship_code": "99"})
        self.assertEqual(ctx.exception.details["field"], "voivodeship_code")
        with self.assertRaises(UnresolvedReference):
            self.svc.list(READER, {"provider_id": 9999})

    def test_status_filter(self):
        first = self.svc.list(READER, {"pageSize": 1}).items[0]
        self.svc.delete(first.id, ADMIN)
        self.assertEqual(self.svc.list(READER, {"status": "deleted"}).total, 1)
        self.assertEqual(self.svc.list(READER, {"status": "active"}).total, 14)

    def test_list_requires_principal(self):
        with self.assertRaises(Unauthorized):
            self.svc.list(None, {})


if __name__ == "__main__":
    unittest.main()
