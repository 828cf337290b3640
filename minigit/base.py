#repository level operations built on top of the disk layer
import os
import logging

from collections import namedtuple

from . import data
from .errors import HeadWriteError, InvalidHeadError, PathCreationError

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = 'main'
DEFAULT_BRANCH_REF = f'refs/heads/{DEFAULT_BRANCH}'

#what init did: created holds the paths that did not exist before
InitResult = namedtuple('InitResult', ['git_dir', 'reinitialized', 'created', 'head_reset'])


def init(git_dir):
    """Create (or re-create the missing parts of) the repository skeleton.

    Existing objects and branch files are left alone, HEAD is always pointed
    back at the default branch. Raises PathCreationError when the repository
    directory or any required sub-path could not be created, and
    HeadWriteError when HEAD could not be written.
    """
    created = []
    failed = []

    reinitialized = os.path.isdir(git_dir)
    if reinitialized:
        logger.info('Reinitializing existing repository in %s', git_dir)
    else:
        try:
            os.mkdir(git_dir)
        except OSError as exc:
            #nothing below can be built without the root
            logger.error('Could not create %s: %s', git_dir, exc)
            raise PathCreationError([git_dir]) from exc
        created.append(git_dir)

    for name in ('objects', 'refs', 'refs/heads'):
        path = f'{git_dir}/{name}'
        if os.path.isdir(path):
            continue
        try:
            os.mkdir(path)
        except OSError as exc:
            logger.error('Could not create %s: %s', path, exc)
            failed.append(path)
            continue
        created.append(path)

    head_reset = _write_head(git_dir, created)

    #touch, never truncate: an existing branch keeps its recorded oid
    main_path = f'{git_dir}/{DEFAULT_BRANCH_REF}'
    existed = os.path.exists(main_path)
    try:
        with open(main_path, 'a'):
            pass
    except OSError as exc:
        logger.error('Could not create %s: %s', main_path, exc)
        failed.append(main_path)
    else:
        if not existed:
            created.append(main_path)

    if failed:
        raise PathCreationError(failed, created)
    logger.info('Initialized repository in %s', git_dir)
    return InitResult(git_dir=git_dir, reinitialized=reinitialized,
                      created=created, head_reset=head_reset)


#points HEAD at the default branch, returns True when it pointed somewhere else before
def _write_head(git_dir, created):
    head_path = f'{git_dir}/HEAD'
    try:
        previous = data.get_ref(git_dir, 'HEAD', deref=False)
    except (OSError, UnicodeDecodeError) as exc:
        #the old value only feeds the warning, HEAD gets rewritten either way
        logger.warning('Could not read %s, overwriting it: %s', head_path, exc)
        previous = None

    try:
        data.write_symbolic_ref(git_dir, 'HEAD', DEFAULT_BRANCH_REF)
    except OSError as exc:
        logger.error('Could not write %s: %s', head_path, exc)
        raise HeadWriteError(head_path, created) from exc

    target = data.RefValue(symbolic=True, value=DEFAULT_BRANCH_REF)
    head_reset = previous is None or (previous.value is not None and previous != target)
    if head_reset and previous is not None:
        #re-init moves HEAD even if another branch was checked out
        logger.warning('HEAD pointed at %s, reset to %s', previous.value, DEFAULT_BRANCH_REF)
    return head_reset


def read_head(git_dir):
    """Return HEAD as a RefValue, either a branch ref or a detached object id.

    Raises InvalidHeadError when HEAD is empty, not text, or points at
    something other than refs/heads/<name>.
    """
    try:
        HEAD = data.get_ref(git_dir, 'HEAD', deref=False)
    except UnicodeDecodeError as exc:
        raise InvalidHeadError('HEAD is not a text file') from exc
    if HEAD.value is None:
        raise InvalidHeadError('HEAD is empty')
    if HEAD.symbolic and not HEAD.value.startswith('refs/heads/'):
        raise InvalidHeadError(f'HEAD points at {HEAD.value}, which is not a branch')
    if not HEAD.symbolic and not data.is_valid_oid(HEAD.value):
        raise InvalidHeadError(f'HEAD holds {HEAD.value!r}, which is neither a ref nor an object id')
    return HEAD


def get_branch_name(git_dir):
    HEAD = read_head(git_dir)
    if not HEAD.symbolic:
        return None
    return os.path.relpath(HEAD.value, 'refs/heads')
