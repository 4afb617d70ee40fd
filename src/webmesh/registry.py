"""
The local registry of networks mirrored from the daemon.

The registry is written to by the periodic list refresh, which replaces the whole contents, and by
workflows, which add, replace or remove single entries. Writes apply in the order they complete.

A refresh snapshot may have been captured by the daemon before a network was dropped locally,
and arrive after. To keep such a stale snapshot from bringing the network back, a refresh takes a
mark() before it calls the daemon and passes it to replace_all(); networks removed after the
mark, and not written again since, are left out.
"""
import logging

from webmesh.network import Network
from webmesh.support.events import EventSource
from webmesh.support.mixins import CommonEqualityMixin

logger = logging.getLogger(__name__)


class NetworkEvent(CommonEqualityMixin):
    """ Notification about a change to one network in a registry. """
    def __init__(self, source, id, network):
        """
        :param source   The registry that posted this event
        :param id       The id of the network that changed
        :param network  The network added or changed, or the network that was removed
        """
        self.source = source
        self.id = id
        self.network = network


class NetworkAddedEvent(NetworkEvent):
    """ A network with a new id is in the registry. """


class NetworkChangedEvent(NetworkEvent):
    """ The entry for an id was replaced. """


class NetworkRemovedEvent(NetworkEvent):
    """ A network is no longer in the registry. """


class ConnectionRegistry:
    """
    An insertion-ordered collection of Network, keyed by id.

    Listeners on `events` receive a NetworkEvent for each change.
    """

    def __init__(self, log=logger):
        self._networks = {}      # id -> Network, in insertion order
        self._removals = {}      # id -> removal generation, for ids removed since the last applied refresh
        self._generation = 0
        self.closed = False
        self.events = EventSource()
        self.logger = log

    def __len__(self):
        return len(self._networks)

    def __contains__(self, id):
        return id in self._networks

    def get(self, id) -> Network:
        return self._networks.get(id)

    def ids(self):
        return list(self._networks)

    def snapshot(self):
        """
        :return: the current networks, in order. The list is a copy and is not affected by later changes.
        """
        return list(self._networks.values())

    def mark(self):
        """
        :return: a marker for the current removal generation, to pass to replace_all() for a
            refresh that starts now.
        """
        return self._generation

    def _writable(self, operation):
        if self.closed:
            self.logger.debug("registry closed, ignoring %s" % operation)
        return not self.closed

    def replace_all(self, networks, mark=None):
        """
        Sets the contents to exactly the given networks. Networks with an id already present
        keep that position.

        :param networks: an iterable of Network
        :param mark: the value of mark() taken before the networks were fetched. When given,
            networks removed locally since then are left out, and older removals are forgotten.
        :return: the list of events fired
        """
        if not self._writable('replace_all'):
            return []
        available = {}
        for network in networks:
            if mark is not None and self._removals.get(network.id, -1) > mark:
                self.logger.debug("ignoring %s from a refresh started before it was removed" % network.id)
                continue
            available[network.id] = network
        if mark is not None:
            self._removals = {id: gen for id, gen in self._removals.items() if gen > mark}

        events = self._changed_events(available)
        ordered = {id: available[id] for id in self._networks if id in available}
        ordered.update(available)
        self._networks = ordered
        self.events.fire_all(events)
        return events

    def _changed_events(self, available: dict) -> list:
        """
        Computes which networks have been added, removed or changed by a replacement.
        """
        events = []
        for id, previous in self._networks.items():
            if id not in available:
                events.append(NetworkRemovedEvent(self, id, previous))
        for id, current in available.items():
            previous = self._networks.get(id)
            if previous is None:
                events.append(NetworkAddedEvent(self, id, current))
            elif previous != current:
                events.append(NetworkChangedEvent(self, id, current))
        return events

    def upsert(self, network: Network):
        """
        Replaces the entry with the same id in place, or appends the network if the id is new.
        A network written here is current, so an earlier removal of its id no longer applies.
        """
        if not self._writable('upsert'):
            return None
        id = network.id
        self._removals.pop(id, None)
        event = NetworkChangedEvent(self, id, network) if id in self._networks \
            else NetworkAddedEvent(self, id, network)
        self._networks[id] = network
        self.events.fire(event)
        return network

    def remove(self, id):
        """
        Removes the entry with the given id. Does nothing if there is none.
        :return: the network removed, or None
        """
        if not self._writable('remove'):
            return None
        self._generation += 1
        self._removals[id] = self._generation
        network = self._networks.pop(id, None)
        if network is not None:
            self.events.fire(NetworkRemovedEvent(self, id, network))
        return network

    def close(self):
        """ discards the contents. Later changes are ignored. """
        self.closed = True
        self._networks = {}
        self._removals = {}
