"""Input forms for the image service."""

import base64
import binascii

from wtforms import Form, StringField, validators
from wtforms.fields import Field
from wtforms.validators import ValidationError

from pictureit.forms import JSONForm, empty_to_none, strip

from ..domain import CONTENT_TYPES


def base64_image(form: Form, field: Field) -> None:
    """Validator for base64-encoded, non-empty content."""
    try:
        decoded = base64.b64decode(field.data, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise ValidationError('Not valid base64') from e
    if not decoded:
        raise ValidationError('Image data is empty')


class ImageForm(JSONForm):
    """A complete image: content, content type and metadata."""

    wire_names = {'content': 'data', 'content_type': 'contentType'}

    content = StringField('Image data', validators=[
        validators.InputRequired(), base64_image
    ])
    content_type = StringField('Content type', validators=[
        validators.InputRequired(), validators.AnyOf(CONTENT_TYPES)
    ])
    description = StringField('Description', filters=[strip, empty_to_none],
                              validators=[validators.Optional(),
                                          validators.Length(max=2048)])
    location = StringField('Location', filters=[strip, empty_to_none],
                           validators=[validators.Optional(),
                                       validators.Length(max=255)])

    @property
    def content_bytes(self) -> bytes:
        """The decoded image data."""
        return base64.b64decode(self.content.data)


class ImagePatchForm(ImageForm):
    """Any subset of the fields of :class:`ImageForm`."""

    content = StringField('Image data', validators=[
        validators.Optional(), base64_image
    ])
    content_type = StringField('Content type', validators=[
        validators.Optional(), validators.AnyOf(CONTENT_TYPES)
    ])
