#serves as disk: the object database and the ref files under .minigit
import os
import hashlib
import logging
import string
import tempfile
import time
import zlib

from collections import namedtuple

from .errors import ObjectNotFoundError, ObjectReadError, ObjectWriteError

logger = logging.getLogger(__name__)

GIT_DIR_NAME = '.minigit' #directory inside the work directory that holds all repo data
OID_LENGTH = 32 #hex characters in every object id
OBJECT_MODE = 0o644 #same as the ref files under a default umask

RefValue = namedtuple('RefValue', ['symbolic', 'value'])


def git_dir_for(workdir='.'):
    """Return the repository directory for a work directory."""
    return os.path.join(workdir, GIT_DIR_NAME)


#points ref (HEAD) at another ref, the file itself is overwritten and never followed
def write_symbolic_ref(git_dir, ref, target):
    with open(f'{git_dir}/{ref}', 'w') as f:
        f.write(f'ref: {target}\n')


def get_ref(git_dir, ref, deref=True): #returns the RefValue for the reference name passed
    return _get_ref_internal(git_dir, ref, deref)[1]


#Returns the actual reference path and a RefValue namedtuple
def _get_ref_internal(git_dir, ref, deref):
    ref_path = f'{git_dir}/{ref}'
    value = None
    if os.path.isfile(ref_path):
        with open(ref_path) as f:
            value = f.read().strip() or None #empty branch file means no commits yet
    symbolic = bool(value) and value.startswith('ref:')
    if symbolic:
        value = value.split(':', 1)[1].strip()
        if deref:
            return _get_ref_internal(git_dir, value, deref=True)
    return ref, RefValue(symbolic=symbolic, value=value)


def digest(content):
    """Object id of ``content``: 32 lowercase hex chars, a pure function of the bytes."""
    return hashlib.blake2b(_as_bytes(content), digest_size=OID_LENGTH // 2).hexdigest()


def write_event_id(content, timestamp=None):
    """Identifier of a single write event.

    Salted with the wall-clock second and a naive checksum of the content, so
    writing identical bytes at different times gives different ids. It has the
    same shape as an object id but is never used as a storage key.
    """
    content = _as_bytes(content)
    if timestamp is None:
        timestamp = int(time.time())
    salt = f'{timestamp}{zlib.crc32(content)}'.encode()
    return hashlib.blake2b(content + salt, digest_size=OID_LENGTH // 2).hexdigest()


def is_valid_oid(oid):
    return (isinstance(oid, str) and len(oid) == OID_LENGTH
            and all(c in string.hexdigits.lower() for c in oid)) #ids are always lowercase


def object_path(git_dir, oid):
    return f'{git_dir}/objects/{oid}'


#stores the bytes as they are under objects/<oid> and returns the oid
def write_object(git_dir, content):
    content = _as_bytes(content)
    oid = digest(content)
    objects_dir = f'{git_dir}/objects'
    tmp_path = None
    try:
        #write next to the destination then rename, a reader never sees half an object
        fd, tmp_path = tempfile.mkstemp(prefix='.tmp-', dir=objects_dir)
        with os.fdopen(fd, 'wb') as out:
            out.write(content)
            out.flush()
            os.fsync(out.fileno())
        os.chmod(tmp_path, OBJECT_MODE) #mkstemp leaves 0600
        os.replace(tmp_path, object_path(git_dir, oid)) #last writer wins
    except OSError as exc:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.remove(tmp_path)
        logger.error('Could not write object %s: %s', oid, exc)
        raise ObjectWriteError(oid) from exc
    logger.debug('Stored object %s (%d bytes)', oid, len(content))
    return oid


#gives the exact bytes stored for an oid
def read_object(git_dir, oid):
    if not is_valid_oid(oid):
        raise ObjectNotFoundError(oid)
    try:
        with open(object_path(git_dir, oid), 'rb') as f:
            content = f.read()
    except FileNotFoundError as exc:
        raise ObjectNotFoundError(oid) from exc
    except OSError as exc:
        logger.error('Could not read object %s: %s', oid, exc)
        raise ObjectReadError(oid) from exc
    logger.debug('Read object %s (%d bytes)', oid, len(content))
    return content


def _as_bytes(content):
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    raise TypeError(f'object content must be bytes, not {type(content).__name__}')
