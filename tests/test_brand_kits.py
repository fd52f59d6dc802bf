# =============================================================================
# tests/test_brand_kits.py - Brand Kit, Company Profile and Logo Tests
# =============================================================================

import pytest

from app.exceptions import FileTooLargeError, InvalidFileTypeError, ResourceNotFoundError
from core.models.brand_kit import BrandKitCreate
from core.services.brand_kit_service import BrandKitService
from core.services.storage_service import StorageService

from tests.conftest import OTHER_USER_ID, USER_ID


class TestBrandKitService:

    def test_first_kit_is_default(self, fake_db):
        first = BrandKitService.create_brand_kit(USER_ID, BrandKitCreate(name="Primary"))
        second = BrandKitService.create_brand_kit(USER_ID, BrandKitCreate(name="Alt"))

        assert first["is_default"] is True
        assert second["is_default"] is False
        assert first["primary_color"] == "#22c55e"

    def test_set_default_is_exclusive(self, fake_db):
        first = BrandKitService.create_brand_kit(USER_ID, BrandKitCreate(name="Primary"))
        second = BrandKitService.create_brand_kit(USER_ID, BrandKitCreate(name="Alt"))

        BrandKitService.set_default(second["id"], USER_ID)

        defaults = [kit["name"] for kit in fake_db.rows("brand_kits") if kit["is_default"]]
        assert defaults == ["Alt"]
        assert BrandKitService.list_brand_kits(USER_ID)[0]["id"] == second["id"]
        assert first["id"] != second["id"]

    def test_deleting_default_promotes_newest(self, fake_db):
        first = BrandKitService.create_brand_kit(USER_ID, BrandKitCreate(name="Primary"))
        BrandKitService.create_brand_kit(USER_ID, BrandKitCreate(name="Alt"))
        newest = BrandKitService.create_brand_kit(USER_ID, BrandKitCreate(name="Newest"))

        BrandKitService.delete_brand_kit(first["id"], USER_ID)

        defaults = [kit["id"] for kit in fake_db.rows("brand_kits") if kit["is_default"]]
        assert defaults == [newest["id"]]

    def test_other_users_kit(self, fake_db):
        kit = fake_db.seed("brand_kits", user_id=OTHER_USER_ID, name="Theirs", is_default=True)
        with pytest.raises(ResourceNotFoundError):
            BrandKitService.get_brand_kit(kit["id"], USER_ID)

    def test_color_validation(self):
        with pytest.raises(ValueError):
            BrandKitCreate(name="Bad", primary_color="green")


class TestBrandKitApi:

    def test_crud(self, client):
        created = client.post("/api/v1/brand-kits", json={"name": "Acme", "primary_color": "#0f172a"})
        kit_id = created.json()["id"]

        patched = client.patch(f"/api/v1/brand-kits/{kit_id}", json={"font_primary": "Poppins"})
        deleted = client.delete(f"/api/v1/brand-kits/{kit_id}")

        assert created.status_code == 201
        assert created.json()["is_default"] is True
        assert patched.json()["font_primary"] == "Poppins"
        assert deleted.status_code == 200
        assert client.get(f"/api/v1/brand-kits/{kit_id}").status_code == 404

    def test_make_default(self, client):
        client.post("/api/v1/brand-kits", json={"name": "One"})
        second = client.post("/api/v1/brand-kits", json={"name": "Two"}).json()

        response = client.post(f"/api/v1/brand-kits/{second['id']}/default")

        assert response.json()["is_default"] is True
        assert [kit["name"] for kit in client.get("/api/v1/brand-kits").json()] == ["Two", "One"]


class TestLogoStorage:

    @pytest.mark.parametrize("filename, content_type", [
        ("logo.PNG", "image/png"),
        ("logo.jpeg", "image/jpeg"),
        ("mark.svg", "image/svg+xml"),
    ])
    def test_accepted_types(self, filename, content_type):
        assert StorageService.validate_logo(filename, 1024) == content_type

    def test_rejected_type(self):
        with pytest.raises(InvalidFileTypeError):
            StorageService.validate_logo("logo.gif", 1024)

    def test_too_large(self):
        with pytest.raises(FileTooLargeError):
            StorageService.validate_logo("logo.png", 6 * 1024 * 1024)

    def test_upload_path(self, fake_db):
        result = StorageService.upload_logo(USER_ID, b"\x89PNG", "brand.png")

        assert result["path"].startswith(f"{USER_ID}/logo-")
        assert result["path"].endswith(".png")
        assert result["logo_url"].endswith(result["path"])


class TestProfileApi:

    def test_empty_profile(self, client):
        response = client.get("/api/v1/profile")
        assert response.status_code == 200
        assert response.json()["company_name"] is None

    def test_upsert(self, client, fake_db):
        client.put("/api/v1/profile", json={"company_name": "Pixel Studio"})
        client.put("/api/v1/profile", json={"company_email": "hi@pixel.test"})

        [row] = fake_db.rows("company_profiles")
        assert (row["company_name"], row["company_email"]) == ("Pixel Studio", "hi@pixel.test")

    def test_logo_upload(self, client, fake_db):
        response = client.post(
            "/api/v1/profile/logo",
            files={"file": ("brand.png", b"\x89PNG\r\n", "image/png")},
        )

        assert response.status_code == 200
        assert fake_db.rows("company_profiles")[0]["company_logo_url"] == response.json()["logo_url"]
        assert len(fake_db.storage.files) == 1

    def test_logo_rejected_type(self, client):
        response = client.post("/api/v1/profile/logo", files={"file": ("brand.gif", b"GIF89a", "image/gif")})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE_TYPE"

    def test_storage_failure(self, client, fake_db):
        fake_db.storage.fail_uploads = True
        response = client.post("/api/v1/profile/logo", files={"file": ("brand.png", b"\x89PNG", "image/png")})
        assert response.status_code == 500
        assert response.json()["code"] == "STORAGE_UPLOAD_ERROR"
