import os
import re

import pytest

from minigit import base, data
from minigit.errors import ObjectNotFoundError, ObjectReadError, ObjectWriteError


@pytest.fixture
def git_dir(tmp_path):
    path = data.git_dir_for(str(tmp_path))
    base.init(path)
    return path


def _leftover_temp_files(git_dir):
    return [name for name in os.listdir(f'{git_dir}/objects') if name.startswith('.tmp-')]


def test_write_then_read_round_trip(git_dir):
    oid = data.write_object(git_dir, b'Hello, MiniGit!')
    assert data.read_object(git_dir, oid) == b'Hello, MiniGit!'


@pytest.mark.parametrize('content', [b'line\n', b'\n\n', b'', b'\x00\xff\r\n'])
def test_read_keeps_trailing_newlines_and_binary(git_dir, content):
    oid = data.write_object(git_dir, content)
    assert data.read_object(git_dir, oid) == content


def test_object_is_stored_verbatim(git_dir):
    oid = data.write_object(git_dir, b'raw bytes\n')
    with open(f'{git_dir}/objects/{oid}', 'rb') as f:
        assert f.read() == b'raw bytes\n'


def test_distinct_content_distinct_digests(git_dir):
    assert data.write_object(git_dir, b'A') != data.write_object(git_dir, b'B')


def test_identical_content_same_digest(git_dir):
    first = data.write_object(git_dir, b'x')
    second = data.write_object(git_dir, b'x')
    assert first == second
    assert os.listdir(f'{git_dir}/objects') == [first]


def test_digest_format(git_dir):
    for content in (b'', b'a', b'Hello, MiniGit!', bytes(range(256))):
        oid = data.write_object(git_dir, content)
        assert re.fullmatch(r'[0-9a-f]{32}', oid)
        assert oid == data.digest(content)


def test_rewrite_replaces_existing_file(git_dir):
    oid = data.write_object(git_dir, b'content')
    with open(f'{git_dir}/objects/{oid}', 'wb') as f:
        f.write(b'damaged')
    assert data.write_object(git_dir, b'content') == oid
    assert data.read_object(git_dir, oid) == b'content'


def test_read_missing_object(git_dir):
    with pytest.raises(ObjectNotFoundError) as excinfo:
        data.read_object(git_dir, '0' * 32)
    assert excinfo.value.oid == '0' * 32


@pytest.mark.parametrize('oid', ['', 'abc', '../HEAD', 'A' * 32, 'g' * 32, '0' * 33])
def test_read_malformed_oid_is_not_found(git_dir, oid):
    with pytest.raises(ObjectNotFoundError):
        data.read_object(git_dir, oid)


def test_read_unreadable_object(git_dir):
    oid = '1' * 32
    os.mkdir(f'{git_dir}/objects/{oid}')
    with pytest.raises(ObjectReadError):
        data.read_object(git_dir, oid)


def test_write_without_objects_directory(tmp_path):
    git_dir = str(tmp_path / '.minigit')
    os.mkdir(git_dir)
    with pytest.raises(ObjectWriteError) as excinfo:
        data.write_object(git_dir, b'lost')
    assert excinfo.value.oid == data.digest(b'lost')
    assert os.listdir(git_dir) == []


def test_failed_write_leaves_no_temp_file(git_dir):
    oid = data.digest(b'blocked')
    os.mkdir(f'{git_dir}/objects/{oid}')
    with pytest.raises(ObjectWriteError):
        data.write_object(git_dir, b'blocked')
    assert _leftover_temp_files(git_dir) == []


def test_write_rejects_text(git_dir):
    with pytest.raises(TypeError):
        data.write_object(git_dir, 'not bytes')


def test_write_event_id_is_time_salted():
    first = data.write_event_id(b'x', timestamp=1000)
    assert re.fullmatch(r'[0-9a-f]{32}', first)
    assert first == data.write_event_id(b'x', timestamp=1000)
    assert first != data.write_event_id(b'x', timestamp=1001)
    assert first != data.digest(b'x')


def test_symbolic_ref_resolves_to_branch(git_dir):
    assert data.get_ref(git_dir, 'HEAD', deref=False) == data.RefValue(symbolic=True, value='refs/heads/main')
    #the branch file exists but is empty
    assert data.get_ref(git_dir, 'HEAD') == data.RefValue(symbolic=False, value=None)


@pytest.mark.skipif(os.name != 'posix', reason='posix file modes')
def test_objects_are_readable_like_refs(git_dir):
    oid = data.write_object(git_dir, b'shared')
    mode = os.stat(data.object_path(git_dir, oid)).st_mode & 0o777
    assert mode == data.OBJECT_MODE
    assert mode & 0o044 == 0o044


def test_write_symbolic_ref_overwrites(git_dir):
    with open(f'{git_dir}/HEAD', 'w') as f:
        f.write('0123456789abcdef0123456789abcdef\n')
    data.write_symbolic_ref(git_dir, 'HEAD', 'refs/heads/main')
    with open(f'{git_dir}/HEAD') as f:
        assert f.read() == 'ref: refs/heads/main\n'
    #the branch HEAD points at is left alone
    with open(f'{git_dir}/refs/heads/main') as f:
        assert f.read() == ''
