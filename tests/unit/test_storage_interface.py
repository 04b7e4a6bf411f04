"""
Storage interface tests
Directory operations built on the backend primitives
"""
from typing import Dict, List, Optional

import pytest

from datalayer.storage import (
    ObjectException,
    StorageConfig,
    StorageInterface,
    StorageObject,
    ValidationException,
)
from datalayer.storage.interfaces import directory_prefix


class InMemoryStorage(StorageInterface):
    """Dictionary-backed storage implementation"""

    def __init__(self, config: StorageConfig):
        super().__init__(config)
        self.objects: Dict[str, bytes] = {}
        self.copies: List[tuple] = []
        self.fail_copy_of: Optional[str] = None

    async def connect(self) -> bool:
        self._connected = True
        return True

    async def disconnect(self) -> None:
        self._connected = False

    async def upload(self, data, path, content_type=None, metadata=None) -> StorageObject:
        self._require_path(path)
        self.objects[path] = data
        return StorageObject(key=path, bucket=self.bucket_name, size=len(data), content_type=content_type)

    async def delete_object(self, path: str) -> bool:
        self._require_path(path)
        self.objects.pop(path, None)
        return True

    async def delete_objects(self, paths: List[str]) -> Dict[str, bool]:
        return {path: self.objects.pop(path, None) is not None for path in paths}

    async def list_directory(self, path: str) -> List[StorageObject]:
        self._require_path(path)
        prefix = directory_prefix(path)
        return [
            StorageObject(key=key, bucket=self.bucket_name, size=len(data))
            for key, data in sorted(self.objects.items())
            if key.startswith(prefix)
        ]

    async def copy_object(self, source: str, destination: str) -> bool:
        if source == self.fail_copy_of:
            raise ObjectException("copy failed", key=source)
        self.objects[destination] = self.objects[source]
        self.copies.append((source, destination))
        return True


@pytest.fixture
def storage():
    return InMemoryStorage(StorageConfig(provider="memory", bucket_name="uploads"))


@pytest.fixture
def boat_pictures(storage):
    storage.objects.update({
        "tmp/boat1/pictures/": b"",
        "tmp/boat1/pictures/berry.jpg": b"jpg",
        "tmp/boat1/pictures/thumbs/berry.jpg": b"small",
        "tmp/boat10/pictures/other.jpg": b"other",
    })
    return storage


class TestDirectoryPrefix:
    """directory_prefix helper tests"""

    @pytest.mark.parametrize("path,expected", [
        ("boats/1/pictures", "boats/1/pictures/"),
        ("boats/1/pictures/", "boats/1/pictures/"),
        ("/boats/1", "boats/1/"),
    ])
    def test_normalization(self, path, expected):
        """Test paths are normalized to a trailing slash"""
        assert directory_prefix(path) == expected


class TestStorageInterface:
    """StorageInterface tests"""

    def test_interface_is_abstract(self):
        """Test the interface cannot be instantiated"""
        with pytest.raises(TypeError):
            StorageInterface(StorageConfig(provider="s3", bucket_name="b"))

    @pytest.mark.asyncio
    async def test_delete_directory(self, boat_pictures):
        """Test every object under the prefix is removed"""
        deleted = await boat_pictures.delete_directory("tmp/boat1/pictures")

        assert deleted == 3
        assert list(boat_pictures.objects) == ["tmp/boat10/pictures/other.jpg"]

    @pytest.mark.asyncio
    async def test_delete_empty_directory(self, storage):
        """Test deleting an empty directory is a no-op"""
        assert await storage.delete_directory("nothing/here") == 0

    @pytest.mark.asyncio
    async def test_delete_directory_requires_path(self, storage):
        """Test an empty path is rejected"""
        with pytest.raises(ValidationException, match="No path was specified"):
            await storage.delete_directory("")

    @pytest.mark.asyncio
    async def test_move_directory(self, boat_pictures):
        """Test objects are copied under the destination then removed"""
        moved = await boat_pictures.move_directory("tmp/boat1/pictures", "boats/boat1/pictures/")

        assert moved == 2
        assert sorted(boat_pictures.objects) == [
            "boats/boat1/pictures/berry.jpg",
            "boats/boat1/pictures/thumbs/berry.jpg",
            "tmp/boat10/pictures/other.jpg",
        ]
        assert boat_pictures.objects["boats/boat1/pictures/thumbs/berry.jpg"] == b"small"

    @pytest.mark.asyncio
    async def test_move_directory_skips_marker(self, boat_pictures):
        """Test the directory marker object is not copied"""
        await boat_pictures.move_directory("tmp/boat1/pictures", "boats/boat1/pictures")

        assert ("tmp/boat1/pictures/", "boats/boat1/pictures/") not in boat_pictures.copies

    @pytest.mark.asyncio
    async def test_move_directory_keeps_source_on_copy_failure(self, boat_pictures):
        """Test a failing copy aborts before the source is deleted"""
        boat_pictures.fail_copy_of = "tmp/boat1/pictures/berry.jpg"

        with pytest.raises(ObjectException):
            await boat_pictures.move_directory("tmp/boat1/pictures", "boats/boat1/pictures")

        assert "tmp/boat1/pictures/berry.jpg" in boat_pictures.objects
        assert "tmp/boat1/pictures/thumbs/berry.jpg" in boat_pictures.objects
        assert ("tmp/boat1/pictures/thumbs/berry.jpg", "boats/boat1/pictures/thumbs/berry.jpg") in boat_pictures.copies

    @pytest.mark.asyncio
    async def test_move_directory_into_itself(self, boat_pictures):
        """Test a destination inside the source is rejected before anything is copied"""
        before = dict(boat_pictures.objects)

        with pytest.raises(ValidationException, match="into itself"):
            await boat_pictures.move_directory("tmp/boat1/pictures", "tmp/boat1/pictures/archive")

        assert boat_pictures.objects == before
        assert boat_pictures.copies == []

    @pytest.mark.asyncio
    async def test_move_directory_into_sibling_prefix(self, boat_pictures):
        """Test a destination sharing only a name prefix is allowed"""
        moved = await boat_pictures.move_directory("tmp/boat1", "tmp/boat10/archive")

        assert moved == 3
        assert "tmp/boat10/archive/pictures/berry.jpg" in boat_pictures.objects
        assert "tmp/boat10/pictures/other.jpg" in boat_pictures.objects

    @pytest.mark.asyncio
    async def test_move_directory_deletes_only_listed_objects(self, boat_pictures):
        """Test objects written under the source during the move are kept"""
        copy_object = boat_pictures.copy_object

        async def copy_and_receive_upload(source, destination):
            boat_pictures.objects["tmp/boat1/pictures/late.jpg"] = b"late"
            return await copy_object(source, destination)

        boat_pictures.copy_object = copy_and_receive_upload

        await boat_pictures.move_directory("tmp/boat1/pictures", "boats/boat1/pictures")

        assert sorted(boat_pictures.objects) == [
            "boats/boat1/pictures/berry.jpg",
            "boats/boat1/pictures/thumbs/berry.jpg",
            "tmp/boat1/pictures/late.jpg",
            "tmp/boat10/pictures/other.jpg",
        ]

    @pytest.mark.asyncio
    async def test_move_directory_requires_paths(self, storage):
        """Test both paths are required"""
        with pytest.raises(ValidationException):
            await storage.move_directory("", "boats")
        with pytest.raises(ValidationException):
            await storage.move_directory("tmp", "")

    @pytest.mark.asyncio
    async def test_health_check(self, storage):
        """Test the health check round-trips a test object"""
        result = await storage.health_check()

        assert result["status"] == "healthy"
        assert storage.objects == {}

    def test_provider_info(self, storage):
        """Test provider information"""
        info = storage.get_provider_info()

        assert info["provider"] == "memory"
        assert info["bucket"] == "uploads"
        assert info["connected"] is False
