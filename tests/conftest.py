import pytest

from fileicon.icons import IconManager
from fileicon.memory import MemoryFilesystem, MemoryIconGenerator


@pytest.fixture
def png_data():
    return b"\x89PNG\r\n\x1a\n" + bytes(range(64))


@pytest.fixture
def fs():
    fs = MemoryFilesystem()
    fs.add_dir("/work")
    return fs


@pytest.fixture
def generator(fs):
    return MemoryIconGenerator(fs)


@pytest.fixture
def manager(fs, generator):
    return IconManager(fs, generator)


@pytest.fixture
def png_image(fs, png_data):
    return fs.add_file("/work/image.png", png_data)


@pytest.fixture
def target_file(fs):
    return fs.add_file("/work/document.txt", b"hello")


@pytest.fixture
def target_folder(fs):
    return fs.add_dir("/work/folder")
