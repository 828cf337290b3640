import argparse #built-in module for parsing command-line arguments
import logging
import os
import sys

from . import base
from . import data
from .errors import HeadWriteError, MinigitError, PathCreationError

logger = logging.getLogger(__name__)

#contents written by test-blob, the first one twice
TEST_BLOBS = (
    'Hello, MiniGit!',
    'This is some different content for a second blob.',
    'Hello, MiniGit!',
)


def main(argv=None):
    args = parse_args(argv) #whatever is written in terminal is passed to args
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )
    args.git_dir = data.git_dir_for(args.workdir)
    logger.debug('Running %s against %s', args.command, args.git_dir)
    try:
        args.func(args) #the function attached to the sub-command
    except (MinigitError, OSError) as e:
        print(f'error: {e}', file=sys.stderr)
        sys.exit(1)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog='minigit')
    parser.add_argument('-C', dest='workdir', default='.', metavar='DIR',
                        help='run as if started in DIR (default: current directory)')
    parser.add_argument('-v', '--verbose', action='store_true', help='log debug output')
    commands = parser.add_subparsers(dest='command') #sub-command name is stored in args.command
    commands.required = True #a sub-command is necessary, unknown ones are usage errors

    init_parser = commands.add_parser('init', help='create an empty repository')
    init_parser.set_defaults(func=init)

    hash_object_parser = commands.add_parser('hash-object', help='store a file as an object')
    hash_object_parser.set_defaults(func=hash_object)
    hash_object_parser.add_argument('file')

    cat_file_parser = commands.add_parser('cat-file', help='print the content of an object')
    cat_file_parser.set_defaults(func=cat_file)
    cat_file_parser.add_argument('object')

    test_blob_parser = commands.add_parser('test-blob', aliases=['test_blob'], help='write and read back sample objects')
    test_blob_parser.set_defaults(func=test_blob)

    status_parser = commands.add_parser('status', help='show the current branch')
    status_parser.set_defaults(func=status)

    return parser.parse_args(argv)


def init(args):
    print('Initializing minigit repository...')
    location = os.path.abspath(args.git_dir)
    try:
        result = base.init(args.git_dir)
    except (PathCreationError, HeadWriteError) as e:
        _print_created(e.created) #whatever got built before the failure
        raise
    if result.reinitialized:
        print(f'Reinitializing existing minigit repository in {location}')
    _print_created(result.created)
    if result.head_reset:
        print('Warning: HEAD was pointing at another branch', file=sys.stderr)
    print(f'Initialized HEAD to point to {base.DEFAULT_BRANCH_REF}')
    print(f'minigit repository initialized in {location}')


def _print_created(paths):
    for path in paths:
        print(f'Created: {path}')


def hash_object(args):
    with open(args.file, 'rb') as f:
        print(data.write_object(args.git_dir, f.read())) #the oid is returned and printed


def cat_file(args):
    content = data.read_object(args.git_dir, args.object)
    sys.stdout.flush()
    sys.stdout.buffer.write(content) #raw bytes, not decoded
    sys.stdout.buffer.flush()


def test_blob(args):
    print('--- Testing Blob Storage ---')
    oids = []
    event_ids = []
    for text in TEST_BLOBS:
        content = text.encode()
        oid = data.write_object(args.git_dir, content)
        oids.append(oid)
        event_ids.append(data.write_event_id(content))
        read_back = data.read_object(args.git_dir, oid)
        print(f'Content: "{text}", Saved as hash: {oid}')
        print(f'Read content for hash {oid}: "{read_back.decode(errors="replace")}"')
        print(f'Content matches: {"true" if read_back == content else "false"}')
        print('')

    print(f'Hash of identical content: {oids[0]} vs {oids[2]}')
    print(f'Write event ids of identical content (time salted): {event_ids[0]} vs {event_ids[2]}')


def status(args):
    if not os.path.isfile(f'{args.git_dir}/HEAD'):
        print(f'error: not a minigit repository: {os.path.abspath(args.workdir)}', file=sys.stderr)
        sys.exit(1)
    HEAD = base.read_head(args.git_dir) #raises InvalidHeadError on an empty or foreign HEAD
    if HEAD.symbolic:
        print(f'On branch {base.get_branch_name(args.git_dir)}')
        if data.get_ref(args.git_dir, HEAD.value).value is None:
            print('No commits yet')
    else:
        print(f'HEAD detached at {HEAD.value[:10]}')
