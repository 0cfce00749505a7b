import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from podmanager.config_loader import load_config
from podmanager.errors import AuthCheckError, PodManagerError
from podmanager.main import build_pod_manager, serve
from podmanager.models.domain import PodConfig
from podmanager.services.pod_service import PodManager
from podmanager.utils import setup_logging

logger = logging.getLogger(__name__)

POD_INFO_TEMPLATE = """Pod Name:\t{name}
Master:\t\t{master}
Quorum:\t\t{quorum}
Auth Token:\t{authpass}
Known Slaves:
{slaves}
Known Sentinels:
{sentinels}
"""


def render_pod_info(pod: PodConfig) -> str:
    def listing(addresses):
        return "\n".join(f"\t{address}" for address in addresses) or "\t(none)"

    text = POD_INFO_TEMPLATE.format(
        name=pod.name,
        master=pod.master_address,
        quorum=pod.quorum,
        authpass=pod.authpass,
        slaves=listing(pod.known_slaves),
        sentinels=listing(pod.known_sentinels),
    )
    cli = f"redis-cli -h {pod.master_ip} -p {pod.master_port}"
    if pod.authpass:
        cli += f" -a {pod.authpass}"
    return text + f"cli string: {cli}\n"


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not a whole number") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"depth must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="podmanager", description="Administer sentinel-managed pods")
    parser.add_argument("-config", help="YAML config file overlaying PODMANAGER_* environment settings")
    parser.add_argument("-podname", default="", help="Name of the pod")
    parser.add_argument("-jsonout", action="store_true", help="output info in JSON format")
    actions = parser.add_mutually_exclusive_group()
    actions.add_argument("-info", action="store_true", help="display pod info screen")
    actions.add_argument("-failover", action="store_true", help="initiate failover on pod")
    actions.add_argument("-reset", action="store_true", help="reset pod")
    actions.add_argument("-validatesentinels", action="store_true", help="check live sentinels vs known")
    actions.add_argument("-remove", action="store_true", help="remove pod from every known sentinel")
    actions.add_argument("-checkauth", action="store_true", help="check the pod password on master and replicas")
    actions.add_argument("-topology", action="store_true", help="list pods sharing addresses with this pod")
    actions.add_argument("-rotate", action="store_true", help="change the pod password everywhere")
    actions.add_argument("-serve", action="store_true", help="run the HTTP API")
    parser.add_argument("-full", action="store_true", help="walk the full topology closure with -topology")
    parser.add_argument("-depth", type=positive_int, help="topology walk depth with -topology")
    parser.add_argument("-oldpass", help="current pod password, for -rotate")
    parser.add_argument("-newpass", help="new pod password, for -rotate")
    return parser


async def run_command(args: argparse.Namespace, manager: PodManager, out=sys.stdout) -> int:
    name = args.podname
    try:
        pod = await manager.get_pod(name)
        if args.info:
            if args.jsonout:
                out.write(pod.model_dump_json() + "\n")
            else:
                out.write(render_pod_info(pod))
            return 0

        if args.failover:
            await manager.failover(name)
            logger.info("Failover initiated")
        elif args.reset:
            await manager.reset(name)
            logger.info("Reset initiated")
        elif args.validatesentinels:
            await manager.validate_sentinels(name)
            logger.info("sentinels validated")
        elif args.remove:
            result = await manager.remove(name)
            logger.info(f"Pod removed from {result.tally()}")
        elif args.checkauth:
            try:
                results = await manager.check_auth(name)
            except AuthCheckError as e:
                results = e.results
                logger.error(str(e))
            for node, ok in results.items():
                out.write(f"{node}\t{'ok' if ok else 'FAILED'}\n")
            return 0 if all(results.values()) else 1
        elif args.topology:
            entangled = await manager.walk_topology(name, depth=args.depth, full=args.full)
            if entangled:
                out.write(f"{name} is entangled with: {', '.join(p.name for p in entangled)}\n")
            else:
                out.write(f"{name} is isolated\n")
        elif args.rotate:
            if args.oldpass is None or not args.newpass:
                logger.error("-rotate needs -oldpass and -newpass")
                return 2
            report = await manager.rotate_credential(name, args.oldpass, args.newpass)
            out.write(report.summary() + "\n")
            return 0 if report.complete else 1
        else:
            logger.error("No action given, nothing to do")
            return 2
    except PodManagerError as e:
        logger.error(f"Error: {e}")
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_config(args.config)
    setup_logging(settings.log_level)

    if args.serve:
        serve(settings)
        return 0

    if not args.podname:
        logger.error("Need a podname. Try using '-podname <podname>'")
        parser.print_help()
        return 2

    return asyncio.run(run_command(args, build_pod_manager(settings)))


if __name__ == "__main__":
    sys.exit(main())
