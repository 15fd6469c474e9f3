import logging
import typing

import mido


logger = logging.getLogger(__name__)


def list_output_devices () -> typing.List[str]:

	"""Names of the available MIDI outputs, or an empty list if the backend fails."""

	try:
		return list(mido.get_output_names())
	except Exception:
		logger.exception("Could not list MIDI outputs")
		return []


def select_output_device (device_name: typing.Optional[str] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:

	"""
	Select and open a MIDI output device.

	If ``device_name`` is provided, opens that device or fails. Otherwise the
	first available output is used; when there are several, the choice is
	logged so the host can pass an explicit name next time. This never
	prompts: drumscribe runs inside a host application.

	Returns:
		A tuple of (device_name, midi_out_object) or (None, None) on failure.
	"""

	outputs = list_output_devices()
	logger.info(f"Available MIDI outputs: {outputs}")

	if not outputs:
		logger.error("No MIDI output devices found.")
		return None, None

	if device_name is not None and device_name not in outputs:
		logger.error(f"MIDI output device '{device_name}' not found. Available devices: {outputs}")
		return None, None

	selected_name = device_name if device_name is not None else outputs[0]

	if device_name is None and len(outputs) > 1:
		logger.warning(f"Several MIDI outputs found - using '{selected_name}'. Pass output_device_name to choose another.")

	try:
		midi_out = mido.open_output(selected_name)
	except Exception as e:
		logger.error(f"Failed to open MIDI output '{selected_name}': {e}")
		return None, None

	logger.info(f"Opened MIDI output: {selected_name}")

	return selected_name, midi_out
