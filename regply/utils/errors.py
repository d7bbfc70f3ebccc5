class RegistrationError(Exception):
	"""
	Base class for failures to register a correspondence set onto a
	reference set. These are definitive refusals on fixed input data and
	are never retried.
	"""
	pass


class SizeMismatchError(RegistrationError, ValueError):
	"""
	Point counts of two sets that are expected to correspond differ.
	"""
	pass


class EmptySetError(RegistrationError, ValueError):
	"""
	An operation that needs at least one point was given none.
	"""
	pass


class DegenerateConfigurationError(RegistrationError, ArithmeticError):
	"""
	The point configuration does not determine a unique transform: fewer
	than three pairs, collinear or coincident points, or a correspondence
	set with zero variance when estimating scale.
	"""
	pass
