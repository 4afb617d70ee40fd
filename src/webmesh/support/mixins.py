def quote(val):
    return "'" + str(val) + "'" if val is not None else "None"


def public_items(obj):
    """ the instance attributes of obj that are not private (no leading underscore), sorted by name. """
    return sorted((k, v) for k, v in obj.__dict__.items() if not k.startswith('_'))


class StringerMixin:

    def __str__(self):
        """
        outputs the class name and the public attributes in key sorted order
        """
        return type(self).__name__ + ':' + self._sorted_items_string()

    def _sorted_items_string(self):
        return "{" + ", ".join(["'" + str(key) + "': " + quote(val)
                                for key, val in public_items(self)]) + "}"


class CommonEqualityMixin(object):
    """
    Value equality for plain data objects: two instances are equal when they are the same class
    and their public attributes are equal. Private attributes, such as references to shared
    collaborators, do not take part in the comparison.
    """

    def __eq__(self, other):
        return isinstance(other, self.__class__) and hasattr(other, '__dict__') \
            and public_items(self) == public_items(other)

    def __ne__(self, other):
        return not self.__eq__(other)

    __hash__ = None
