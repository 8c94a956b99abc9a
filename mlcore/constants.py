APP_NAME = "mlcore"

# Extensions the image loader accepts, lower-case and without the leading dot
SUPPORTED_IMAGE_EXTENSIONS = (
    "jpg",
    "jpeg",
    "png",
    "tga",
    "bmp",
    "psd",
    "gif",
    "hdr",
    "pic",
    "pnm",
    "ppm",
    "pgm",
)

# Extensions Pillow can encode, mapped to the Pillow format name
SAVABLE_IMAGE_FORMATS = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "tga": "TGA",
    "bmp": "BMP",
    "gif": "GIF",
    "pnm": "PPM",
    "ppm": "PPM",
    "pgm": "PPM",
}

# Pillow modes matching a requested channel count
CHANNEL_MODES = {1: "L", 2: "LA", 3: "RGB", 4: "RGBA"}

# Radiance RGBE headers (.hdr and .pic), decoded with OpenCV instead of Pillow
RADIANCE_SIGNATURES = (b"#?RADIANCE", b"#?RGBE")
HDR_GAMMA = 2.2
