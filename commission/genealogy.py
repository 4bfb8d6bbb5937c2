# commission/genealogy.py
from typing import List, Optional, Dict, Any, NamedTuple
import logging

from models import User
from commission.directory import UserDirectory

logger = logging.getLogger(__name__)

MAX_GENEALOGY_DEPTH = 20  # 20-level limit


class GenealogyEntry(NamedTuple):
    user: User
    level: int


class GenealogyHelper:
    """
    Tree queries over the sponsor parent pointer.
    Every walk is iterative and hop-bounded, so corrupted data (cycles,
    dangling sponsors) yields a truncated result rather than an error.
    """

    @staticmethod
    def ancestor_chain(user_id: int, max_levels: int = MAX_GENEALOGY_DEPTH) -> List[GenealogyEntry]:
        """
        [(user, 0), (sponsor, 1), (sponsor's sponsor, 2), ...] up to max_levels.
        Stops at a root, a missing user, a repeated user, or after max_levels + 1 entries.
        The cached User.level is never consulted.
        """
        chain: List[GenealogyEntry] = []
        seen = set()
        current_id = user_id

        for level in range(max_levels + 1):
            if current_id is None:
                break

            if current_id in seen:
                logger.warning(f"Sponsor cycle detected above user {user_id} at user {current_id}; chain truncated")
                break

            user = UserDirectory.find_by_id(current_id)
            if not user:
                if level > 0:
                    logger.warning(f"Dangling sponsor pointer {current_id} above user {user_id}; chain truncated")
                break

            chain.append(GenealogyEntry(user, level))
            seen.add(current_id)
            current_id = user.sponsor_id

        return chain

    @staticmethod
    def direct_children(user_id: int) -> List[User]:
        return UserDirectory.find_direct_children_of(user_id)

    @staticmethod
    def descendants(user_id: int, max_depth: int = MAX_GENEALOGY_DEPTH) -> List[GenealogyEntry]:
        """
        Level-labelled downline, direct children at level 1.
        Breadth-first over an explicit frontier, one query per depth.
        """
        downline: List[GenealogyEntry] = []
        visited = {user_id}
        frontier = [user_id]
        depth = 1

        while frontier and depth <= max_depth:
            next_frontier = []
            for child in UserDirectory.find_direct_children_of_many(frontier):
                if child.id in visited:
                    continue
                visited.add(child.id)
                downline.append(GenealogyEntry(child, depth))
                next_frontier.append(child.id)

            frontier = next_frontier
            depth += 1

        return downline

    @staticmethod
    def path_between(root_id: int, target_id: int,
                     max_depth: int = MAX_GENEALOGY_DEPTH) -> Optional[List[GenealogyEntry]]:
        """
        Chain from root (level 0) down to target, or None when target is not
        in root's downline.
        """
        downline = GenealogyHelper.descendants(root_id, max_depth)
        levels = {entry.user.id: entry.level for entry in downline}
        if target_id not in levels:
            return None

        path: List[GenealogyEntry] = []
        current_id = target_id

        # target is at most max_depth hops below root
        for _ in range(max_depth + 1):
            user = UserDirectory.find_by_id(current_id)
            if not user:
                break

            if user.id == root_id:
                path.append(GenealogyEntry(user, 0))
                break

            path.append(GenealogyEntry(user, levels.get(user.id, 0)))

            if user.sponsor_id is None:
                break
            current_id = user.sponsor_id

        path.reverse()
        return path

    @staticmethod
    def downline_tree(user_id: int, max_depth: int = 5) -> Optional[Dict[str, Any]]:
        """Nested {'user', 'level', 'children'} tree rooted at user_id."""
        root_user = UserDirectory.find_by_id(user_id)
        if not root_user:
            return None

        root = {'user': root_user, 'level': 0, 'children': []}
        nodes = {root_user.id: root}
        frontier = [root_user.id]
        depth = 1

        while frontier and depth <= max_depth:
            next_frontier = []
            for child in UserDirectory.find_direct_children_of_many(frontier):
                if child.id in nodes:
                    continue
                node = {'user': child, 'level': depth, 'children': []}
                nodes[child.sponsor_id]['children'].append(node)
                nodes[child.id] = node
                next_frontier.append(child.id)

            frontier = next_frontier
            depth += 1

        return root

    @staticmethod
    def network_summary(user_id: int) -> Dict[str, Any]:
        ancestors = GenealogyHelper.ancestor_chain(user_id)
        direct = GenealogyHelper.direct_children(user_id)
        downline = GenealogyHelper.descendants(user_id)

        return {
            'user_id': user_id,
            'upline_count': max(0, len(ancestors) - 1),
            'direct_referrals_count': len(direct),
            'total_downline': len(downline),
            'deepest_level': max((entry.level for entry in downline), default=0),
        }
