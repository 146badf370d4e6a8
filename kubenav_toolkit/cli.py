"""Entry points for the kubenav CLI."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from . import runner
from .config import Settings, load_settings
from .console import is_interactive, log, warn
from .credentials import CredentialStore
from .errors import ConfigError, KubenavError, NoSelectionError
from .importer import import_credential_file
from .kubectl import Kubectl
from .reconcile import FileScan, Reconciler
from .removal import ABORTED, ContextRemoval
from .rename import RenamePropagator, prompt_renames
from .selector import FzfSelector
from .session import Session
from .state import ContextRegistry, NamespaceCache, SelectionStore
from .state.selection import format_selection

CONTEXT_OPTION_HELP = (
    "Context whose namespace cache to use (defaults to the saved or current context)."
)


@dataclass(slots=True)
class Toolkit:
    """Every collaborator a command handler needs, wired from one ``Settings``."""

    settings: Settings
    kubectl: Kubectl
    selector: FzfSelector
    store: CredentialStore
    registry: ContextRegistry
    namespaces: NamespaceCache
    selection: SelectionStore
    session: Session

    @property
    def propagator(self) -> RenamePropagator:
        return RenamePropagator(self.kubectl, self.registry, self.namespaces, self.selection)


def build_toolkit(settings: Settings) -> Toolkit:
    kubectl = Kubectl(settings.kubectl, timeout=settings.command_timeout)
    store = CredentialStore(settings.kubeconfig_dir)
    registry = ContextRegistry(settings.registry_path, kubectl)
    selection = SelectionStore(settings.selection_path)
    return Toolkit(
        settings=settings,
        kubectl=kubectl,
        selector=FzfSelector(settings.fzf),
        store=store,
        registry=registry,
        namespaces=NamespaceCache(settings.namespace_dir),
        selection=selection,
        session=Session(kubectl=kubectl, store=store, registry=registry, selection=selection),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kubenav",
        description=(
            "Track which kubeconfig defines each context and restore the last "
            "context and namespace you used."
        ),
    )
    parser.set_defaults(handler=None)
    subparsers = parser.add_subparsers(dest="command")

    show_saved_parser = subparsers.add_parser(
        "show-saved", help="Print the saved kubeconfig, context and namespace."
    )
    show_saved_parser.set_defaults(handler=_handle_show_saved)

    status_parser = subparsers.add_parser(
        "status", help="Show the active kubeconfig, context and namespace."
    )
    status_parser.set_defaults(handler=_handle_status)

    list_parser = subparsers.add_parser(
        "list-contexts", help="List registered contexts and their kubeconfig files."
    )
    list_parser.set_defaults(handler=_handle_list_contexts)

    import_parser = subparsers.add_parser(
        "import", help="Copy a kubeconfig into the managed directory and register it."
    )
    import_parser.add_argument("path", help="Kubeconfig file to import.")
    import_parser.add_argument(
        "--no-rename",
        action="store_true",
        help="Skip the per-context rename prompt after importing.",
    )
    import_parser.set_defaults(handler=_handle_import)

    rebuild_parser = subparsers.add_parser(
        "rebuild-registry",
        help="Rescan every managed kubeconfig and rebuild the context map.",
    )
    rebuild_parser.add_argument(
        "--prompt-all",
        action="store_true",
        help="Offer rename prompts for every file, not only newly detected ones.",
    )
    rebuild_parser.set_defaults(handler=_handle_rebuild)

    rename_parser = subparsers.add_parser(
        "rename-context", help="Rename a registered context everywhere it is recorded."
    )
    rename_parser.add_argument("old", help="Current context name.")
    rename_parser.add_argument("new", help="New context name.")
    rename_parser.set_defaults(handler=_handle_rename_context)

    rename_file_parser = subparsers.add_parser(
        "rename-file", help="Prompt for new names for every context in a kubeconfig."
    )
    rename_file_parser.add_argument("path", help="Kubeconfig file whose contexts to rename.")
    rename_file_parser.set_defaults(handler=_handle_rename_file)

    remove_parser = subparsers.add_parser(
        "remove-context",
        help="Remove a context, its kubeconfig if empty, and its namespace cache.",
    )
    remove_parser.add_argument("context", nargs="?", help="Context to remove.")
    remove_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show planned actions without making changes.",
    )
    remove_parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Skip the confirmation prompt and proceed.",
    )
    remove_parser.set_defaults(handler=_handle_remove_context)

    select_context_parser = subparsers.add_parser(
        "select-context", help="Switch to a registered context and save the selection."
    )
    select_context_parser.add_argument("context", nargs="?", help="Context to switch to.")
    select_context_parser.set_defaults(handler=_handle_select_context)

    select_namespace_parser = subparsers.add_parser(
        "select-namespace",
        help="Set the namespace on the current context from the live list or the cache.",
    )
    select_namespace_parser.add_argument("namespace", nargs="?", help="Namespace to use.")
    select_namespace_parser.add_argument("--context", help=CONTEXT_OPTION_HELP)
    select_namespace_parser.set_defaults(handler=_handle_select_namespace)

    add_namespace_parser = subparsers.add_parser(
        "add-namespace", help="Remember a namespace for the current context."
    )
    add_namespace_parser.add_argument("namespace", help="Namespace to cache.")
    add_namespace_parser.add_argument("--context", help=CONTEXT_OPTION_HELP)
    add_namespace_parser.set_defaults(handler=_handle_add_namespace)

    remove_namespace_parser = subparsers.add_parser(
        "remove-namespace", help="Forget cached namespaces for the current context."
    )
    remove_namespace_parser.add_argument(
        "namespace",
        nargs="?",
        help="Namespace to forget; pick one or more interactively when omitted.",
    )
    remove_namespace_parser.add_argument("--context", help=CONTEXT_OPTION_HELP)
    remove_namespace_parser.set_defaults(handler=_handle_remove_namespace)

    list_namespaces_parser = subparsers.add_parser(
        "list-namespaces", help="Print cached namespaces for the current context."
    )
    list_namespaces_parser.add_argument("--context", help=CONTEXT_OPTION_HELP)
    list_namespaces_parser.set_defaults(handler=_handle_list_namespaces)

    return parser


def _handle_show_saved(toolkit: Toolkit, args: argparse.Namespace) -> int:
    record = toolkit.selection.load()
    if record is None:
        print("No saved selection")
        return 0
    for line in format_selection(record):
        print(line)
    return 0


def _handle_status(toolkit: Toolkit, args: argparse.Namespace) -> int:
    toolkit.session.restore()
    for line in toolkit.session.status().lines():
        print(line)
    return 0


def _handle_list_contexts(toolkit: Toolkit, args: argparse.Namespace) -> int:
    records = toolkit.registry.all_records()
    if not records:
        print("No contexts registered.")
        return 0
    for record in records:
        print(f"{record.context}\t{record.credential_file}")
    return 0


def _handle_import(toolkit: Toolkit, args: argparse.Namespace) -> int:
    propagator = None if args.no_rename or not is_interactive() else toolkit.propagator
    try:
        result = import_credential_file(
            Path(args.path),
            store=toolkit.store,
            registry=toolkit.registry,
            kubectl=toolkit.kubectl,
            propagator=propagator,
        )
    except FileNotFoundError as exc:
        warn(str(exc))
        return 1
    if not result.contexts:
        warn(f"No contexts found in {result.credential_file}; nothing registered yet.")
    return 0


def _handle_rebuild(toolkit: Toolkit, args: argparse.Namespace) -> int:
    reconciler = Reconciler(toolkit.store, toolkit.registry, toolkit.kubectl)
    propagator = toolkit.propagator

    def offer_renames(scan: FileScan) -> None:
        prompt_renames(propagator, scan.credential_file)

    result = reconciler.rebuild(
        on_file=offer_renames if is_interactive() else None,
        prompt_all=args.prompt_all,
    )
    log(
        f"Rebuilt context map at {toolkit.registry.path} "
        f"({len(result.scans)} files, {len(result.new_files)} new)"
    )
    return 0


def _handle_rename_context(toolkit: Toolkit, args: argparse.Namespace) -> int:
    new = args.new.strip()
    if not new:
        warn("No new name provided, aborting.")
        return 1
    if new == args.old:
        log("Name unchanged.")
        return 0
    credential_file = toolkit.registry.lookup(args.old)
    if credential_file is None:
        warn(f"Context {args.old} not found in context map.")
        return 1
    result = toolkit.propagator.rename(args.old, new, credential_file)
    log(f"Renamed context: {result.old} -> {result.new}")
    if result.migrated_namespaces:
        log(f"Moved {len(result.migrated_namespaces)} cached namespace(s) to {result.new}")
    return 0


def _handle_rename_file(toolkit: Toolkit, args: argparse.Namespace) -> int:
    path = Path(args.path).expanduser()
    if not path.is_file():
        warn(f"File not found: {path}")
        return 1
    prompt_renames(toolkit.propagator, path)
    return 0


def _choose_context(toolkit: Toolkit, prompt: str) -> str:
    records = toolkit.registry.all_records()
    if not records:
        raise NoSelectionError("No contexts registered.")
    labels = {f"{record.context} ({record.credential_file.name})": record for record in records}
    chosen = toolkit.selector.choose(list(labels), prompt=prompt)
    if not chosen:
        raise NoSelectionError("No context selected")
    return labels[chosen[0]].context


def _handle_remove_context(toolkit: Toolkit, args: argparse.Namespace) -> int:
    context = args.context or _choose_context(toolkit, "Remove context: ")
    removal = ContextRemoval(
        context=context,
        kubectl=toolkit.kubectl,
        store=toolkit.store,
        registry=toolkit.registry,
        namespaces=toolkit.namespaces,
        selection=toolkit.selection,
        session=toolkit.session,
        dry_run=args.dry_run,
        assume_yes=args.yes,
    )
    state = removal.run()
    if state == ABORTED:
        warn(removal.abort_reason or "Aborted.")
        return 1
    return 0


def _handle_select_context(toolkit: Toolkit, args: argparse.Namespace) -> int:
    context = args.context or _choose_context(toolkit, "Context: ")
    record = toolkit.session.select_context(context)
    log(f"Switched context to {record.context} (using {record.credential_file})")
    return 0


def _handle_select_namespace(toolkit: Toolkit, args: argparse.Namespace) -> int:
    session = toolkit.session
    session.restore()
    namespace = args.namespace
    from_cache = False
    if not namespace:
        env = session.kubeconfig_env()
        if toolkit.kubectl.can_list_namespaces(env=env):
            candidates = toolkit.kubectl.list_namespaces(env=env)
            prompt = "Namespace: "
        else:
            context = session.resolve_context(args.context)
            candidates = toolkit.namespaces.list(context)
            prompt = "Namespace (cached): "
            from_cache = True
        chosen = toolkit.selector.choose(candidates, prompt=prompt)
        if not chosen:
            raise NoSelectionError("No namespace selected")
        namespace = chosen[0]
    session.select_namespace(namespace)
    suffix = " (from cache)" if from_cache else ""
    log(f"Namespace set to {namespace} on current context{suffix}")
    return 0


def _handle_add_namespace(toolkit: Toolkit, args: argparse.Namespace) -> int:
    if not args.namespace.strip():
        warn("No namespace provided")
        return 1
    context = toolkit.session.resolve_context(args.context)
    cache = toolkit.namespaces.path_for(context)
    try:
        added = toolkit.namespaces.add(context, args.namespace)
    except ValueError as exc:
        warn(str(exc))
        return 1
    if added:
        log(f"Added {args.namespace} to {cache}")
    else:
        log(f"{args.namespace} already exists in {cache}")
    return 0


def _handle_remove_namespace(toolkit: Toolkit, args: argparse.Namespace) -> int:
    context = toolkit.session.resolve_context(args.context)
    cache = toolkit.namespaces.path_for(context)
    if args.namespace:
        if toolkit.namespaces.remove(context, args.namespace):
            log(f"Removed {args.namespace} from {cache}")
        else:
            log(f"{args.namespace} is not cached in {cache}")
        return 0

    cached = toolkit.namespaces.list(context)
    if not cached:
        warn("No cached namespaces to remove for current context.")
        return 1
    chosen = toolkit.selector.choose(
        cached, prompt="Select cached namespace(s) to remove: ", multi=True
    )
    if not chosen:
        warn("No selection")
        return 1
    for namespace in toolkit.namespaces.remove_many(context, chosen):
        log(f"Removed {namespace}")
    return 0


def _handle_list_namespaces(toolkit: Toolkit, args: argparse.Namespace) -> int:
    context = toolkit.session.resolve_context(args.context)
    for namespace in toolkit.namespaces.list(context):
        print(namespace)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 1

    try:
        toolkit = build_toolkit(load_settings())
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return 2

    try:
        return handler(toolkit, args)
    except KubenavError as exc:
        print(exc, file=sys.stderr)
        return 1
    except runner.CommandError as exc:
        print(exc, file=sys.stderr)
        return 1
