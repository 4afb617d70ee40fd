class EventSource(object):
    """
    A list of handlers that are called with whatever is passed to fire().

    Handlers are added with add() or +=, and removed with remove() or -=.
    Handlers are called in the order they were added, on the calling task.
    """

    def __init__(self):
        self._handlers = []

    def __iadd__(self, handler):
        return self.add(handler)

    def __isub__(self, handler):
        return self.remove(handler)

    def add(self, handler):
        self._handlers.append(handler)
        return self

    def remove(self, handler):
        if handler in self._handlers:
            self._handlers.remove(handler)
        return self

    def subscribe(self, handler):
        """
        Adds a handler and returns a callable that removes it again.
        :param handler: called with the arguments of each fire()
        :return: a no-argument callable that unsubscribes the handler
        """
        self.add(handler)
        return lambda: self.remove(handler)

    def handlers(self):
        return tuple(self._handlers)

    def fire(self, *args, **kwargs):
        self._fire(*args, **kwargs)

    def fire_all(self, events):
        for e in events:
            self._fire(e)

    def _fire(self, *args, **kwargs):
        # iterate a copy so handlers may unsubscribe while being notified
        for handler in tuple(self._handlers):
            handler(*args, **kwargs)


class ObservableValue:
    """
    Holds the most recent value of something and notifies listeners when it is replaced.

    Listeners registered on `events` are called with (new_value, previous_value).
    Setting the same value again is not a change and fires nothing.
    """

    def __init__(self, value=None):
        self._value = value
        self.events = EventSource()

    @property
    def value(self):
        return self._value

    @value.setter
    def value(self, value):
        self.set(value)

    def set(self, value):
        """
        :return: True if the value changed and listeners were notified.
        """
        previous = self._value
        if value is previous:
            return False
        self._value = value
        self.events.fire(value, previous)
        return True

    def clear(self):
        return self.set(None)

    def __bool__(self):
        return self._value is not None
