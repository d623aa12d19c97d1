"""Design document.

Abstractions related to image content:

PixelImage - An image decoded from a JPEG or PNG (or produced by an
        operation). PixelImages are immutable: the pixel buffer is
        read-only, and every operation returns a new PixelImage.
        Two PixelImages are equal when their pixels are equal.

        Each image carries a history of where it came from and what
        was done to it. The history is for humans; it is not
        compared.

Abstractions related to image processing:

Operation - a single elementary transform (sepia, invert, crop...)
        with its parameters. An Operation is a value; the same
        Operation can be executed on any number of images.

FilterGraph - An ordered chain of Operations. The first operation
        receives the input image and each following operation
        receives the output of the one before it. If any stage
        fails, the graph produces no image at all.

FilterDefinition - A named, user-selectable filter ("Sepia",
        "Zoom Blur"). Given the size of an image, it builds the
        FilterGraph for that image. The "None" filter never builds a
        graph; it just returns its input.

FilterCatalog - The fixed, ordered list of FilterDefinitions offered
        to the user. Catalogs are constructed explicitly and passed
        to whatever needs them.

Collaborators:

ArtworkLibrary - stores finished images with a caption, a rating and
        a timestamp.

fetch_candidate_images - retrieves the list of images offered for
        filtering from a JSON endpoint.

prompt_capture - asks the user for a caption and a rating.

"""

__version__ = '1.0.0'
