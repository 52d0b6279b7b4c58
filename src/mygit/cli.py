"""Command-line interface for mygit"""
import argparse
import logging
import os
import sys

from .engine import DEFAULT_GIT_DIR, Repository
from .errors import ObjectStoreError
from .model.commit import join_message
from .model.tree import DIRECTORY_MODE, NAME_ERRORS, TREE_KIND, Tree
from .storage.transfer import export_store

logger = logging.getLogger(__name__)

GIT_DIR_ENV = 'MYGIT_DIR'


def parse_args(argv):
    parser = argparse.ArgumentParser(prog='mygit')
    parser.add_argument('--git-dir', default=None,
                        help=f'store root (default: ${GIT_DIR_ENV} or {DEFAULT_GIT_DIR})')
    parser.add_argument('-v', '--verbose', action='store_true')
    commands = parser.add_subparsers(dest='command')
    commands.required = True

    init_parser = commands.add_parser('init')
    init_parser.set_defaults(func=init)

    hash_object_parser = commands.add_parser('hash-object')
    hash_object_parser.set_defaults(func=hash_object)
    hash_object_parser.add_argument('-w', dest='write', action='store_true')
    hash_object_parser.add_argument('-t', '--type', default='blob')
    hash_object_parser.add_argument('file')

    cat_file_parser = commands.add_parser('cat-file')
    cat_file_parser.set_defaults(func=cat_file)
    mode = cat_file_parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('-p', dest='mode', action='store_const', const='pretty')
    mode.add_argument('-t', dest='mode', action='store_const', const='type')
    mode.add_argument('-s', dest='mode', action='store_const', const='size')
    cat_file_parser.add_argument('object')

    write_tree_parser = commands.add_parser('write-tree')
    write_tree_parser.set_defaults(func=write_tree)
    write_tree_parser.add_argument('--flat', action='store_true',
                                   help='store one tree keyed by full relative paths')
    write_tree_parser.add_argument('directory', nargs='?', default='.')

    ls_tree_parser = commands.add_parser('ls-tree')
    ls_tree_parser.set_defaults(func=ls_tree)
    ls_tree_parser.add_argument('--name-only', action='store_true')
    ls_tree_parser.add_argument('-r', dest='recursive', action='store_true')
    ls_tree_parser.add_argument('tree')

    commit_tree_parser = commands.add_parser('commit-tree')
    commit_tree_parser.set_defaults(func=commit_tree)
    commit_tree_parser.add_argument('tree')
    commit_tree_parser.add_argument('-m', '--message', nargs='+', required=True)

    checkout_parser = commands.add_parser('checkout')
    checkout_parser.set_defaults(func=checkout)
    checkout_parser.add_argument('object')
    checkout_parser.add_argument('directory', nargs='?', default='.')

    fsck_parser = commands.add_parser('fsck')
    fsck_parser.set_defaults(func=fsck)

    clone_parser = commands.add_parser('clone')
    clone_parser.set_defaults(func=clone)
    clone_parser.add_argument('source')
    clone_parser.add_argument('destination')

    return parser.parse_args(argv)


def main(argv=None):
    try:
        args = parse_args(sys.argv[1:] if argv is None else argv)
    except SystemExit as e:
        # argparse exits 2 on usage errors; every failure here is 1.
        return 0 if e.code == 0 else 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )
    git_dir = args.git_dir or os.environ.get(GIT_DIR_ENV) or DEFAULT_GIT_DIR
    repo = Repository(git_dir)

    try:
        return args.func(repo, args) or 0
    except (ObjectStoreError, OSError) as e:
        logger.debug('command %s failed', args.command, exc_info=True)
        print(f'fatal: {e}', file=sys.stderr)
        return 1


def _format_entry(mode, address, path):
    kind = 'tree' if mode == DIRECTORY_MODE else 'blob'
    return f'{mode.rjust(6, "0")} {kind} {address}\t{path}'


def _echo_path_line(line):
    # Entry names may hold raw bytes that print() cannot encode.
    sys.stdout.flush()
    sys.stdout.buffer.write(line.encode('utf-8', NAME_ERRORS) + b'\n')
    sys.stdout.buffer.flush()


def init(repo, args):
    repo.initialize()
    print(f'Initialized empty mygit repository in {repo.git_dir}')


def hash_object(repo, args):
    with open(args.file, 'rb') as f:
        print(repo.hash_object(f.read(), kind=args.type, write=args.write))


def cat_file(repo, args):
    if args.mode == 'type':
        print(repo.object_header(args.object)[0])
        return
    if args.mode == 'size':
        print(repo.object_header(args.object)[1])
        return

    kind, payload = repo.cat_file(args.object)
    if kind == TREE_KIND:
        for entry in Tree.deserialize(payload):
            _echo_path_line(_format_entry(entry.mode, entry.address, entry.name))
        return
    sys.stdout.flush()
    sys.stdout.buffer.write(payload)
    sys.stdout.buffer.flush()


def write_tree(repo, args):
    print(repo.write_tree(args.directory, flat=args.flat))


def ls_tree(repo, args):
    for mode, path, address in repo.ls_tree(args.tree, recursive=args.recursive):
        _echo_path_line(path if args.name_only else _format_entry(mode, address, path))


def commit_tree(repo, args):
    print(repo.commit_tree(args.tree, join_message(args.message)))


def checkout(repo, args):
    count = repo.checkout(args.object, args.directory)
    print(f'Checked out {count} files into {args.directory}')


def fsck(repo, args):
    result = repo.detect_tampering()
    for error in result['errors']:
        print(error, file=sys.stderr)
    print(f"{result['verified']} objects verified, {len(result['tampered'])} corrupted")
    return 1 if result['tampered'] else 0


def clone(repo, args):
    # Arguments are working directories; each store lives in <dir>/.git.
    source = os.path.join(args.source, DEFAULT_GIT_DIR)
    destination = os.path.join(args.destination, DEFAULT_GIT_DIR)
    count = export_store(source, destination)
    print(f'Cloned {count} objects from {args.source} into {args.destination}')


if __name__ == '__main__':
    raise SystemExit(main())
