import logging
import os

import cv2
import numpy as np
from flask import Flask, request, jsonify

# load envs
from dotenv import load_dotenv
load_dotenv()

from doc_detection import DetectorConfig, DocumentDetector, crop_hint, to_display


PORT = int(os.getenv("PORT", 5000))
HOST = os.getenv("HOST", None)

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger("server")

app = Flask(__name__)


# Enable CORS for all routes
from flask_cors import CORS
CORS(app)

# Set the maximum upload size to 20MB (a single camera frame)
MEGABYTE = (2 ** 10) ** 2
app.config['MAX_CONTENT_LENGTH'] = 20 * MEGABYTE

# Setup Swagger
from flasgger import Swagger, swag_from
swagger_config = {
    "headers": [],
    "specs_route": "/docs/",
    "static_url_path": "/flasgger_static",
    "specs": [
        {
            "endpoint": 'apispec_1',
            "route": '/docs-json',
            "rule_filter": lambda rule: True,  # all in
            "model_filter": lambda tag: True,  # all in
        }
    ],
}
swagger = Swagger(app, config=swagger_config, merge=True)

detector = DocumentDetector(DetectorConfig.from_env())


def parse_display_size():
    width = request.args.get('displayWidth', type=float)
    height = request.args.get('displayHeight', type=float)
    if width is None or height is None:
        return None
    if width <= 0 or height <= 0:
        raise ValueError("displayWidth and displayHeight must be positive")
    return width, height


@app.route('/is-available', methods=['GET'])
@swag_from("server/swagger/is-available.yml")
def is_available():
    return jsonify(isAvailable=True), 200


@app.route('/analyze-frame', methods=['POST'])
@swag_from("server/swagger/analyze-frame.yml")
def analyze_frame():
    file = request.files.get('file')
    if file is None:
        return jsonify(message="No file"), 400

    try:
        display_size = parse_display_size()
    except ValueError as e:
        return jsonify(message=str(e)), 400

    buffer = np.frombuffer(file.read(), dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
    if image is None:
        return jsonify(message="Cannot decode image"), 400

    height, width = image.shape[:2]
    native = detector.analyze_image(image)
    logger.debug("Analyzed %dx%d frame, detected: %s", width, height, native is not None)

    if native is None:
        return jsonify(detected=False, width=width, height=height, quadrilateral=None, cropHint=None), 200

    quad = native
    if display_size is not None:
        quad = to_display(native, (width, height), display_size)

    return jsonify(
        detected=True,
        width=width,
        height=height,
        quadrilateral=quad.to_dict(),
        cropHint=crop_hint(native, (width, height)).to_dict()
    ), 200


if __name__ == '__main__':
    app.run(debug=True, port=PORT, host=HOST)
