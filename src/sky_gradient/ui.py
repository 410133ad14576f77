import calendar
import time

import gradio as gr

from sky_gradient import constants
from sky_gradient.config import AtmosphereConfig
from sky_gradient.generator import SkyGradientGenerator
from sky_gradient.preview import gradient_image

CSS = """
.gradio-container { background-color: #0b0f19 !important; color: #e5e7eb !important; }
#sky_img { background-color: #0b0f19 !important; border-radius: 8px; overflow: hidden; border: none !important; }

/* Keep the previous image visible while the next one renders */
.generating, .pending { opacity: 1 !important; filter: none !important; transition: none !important; }
.loading, .progress-view, .loader, .spinner { display: none !important; visibility: hidden !important; }
"""


def timestamp_for(day_of_year, hour_utc, year=None):
    """Unix timestamp of a (day of year, fractional UTC hour) in the given year."""
    year = year if year is not None else time.gmtime().tm_year
    start = calendar.timegm((year, 1, 1, 0, 0, 0))
    return int(start + (int(day_of_year) - 1) * 86400 + hour_utc * 3600.0)


def create_ui():
    generators = {}

    def generator_for(samples):
        # One generator (and transmittance cache) per sample count
        samples = int(samples)
        if samples not in generators:
            generators[samples] = SkyGradientGenerator(AtmosphereConfig(samples=samples))
        return generators[samples]

    def render_frame(latitude, longitude, day_of_year, hour_utc, samples):
        generator = generator_for(samples)
        timestamp = timestamp_for(day_of_year, hour_utc)
        descriptor = generator.generate(latitude, longitude, timestamp)
        elevation = generator.elevation_or_default(latitude, longitude, timestamp)
        info = (f"**Sun elevation:** {elevation:.4f} rad  \n"
                f"**Top:** `{descriptor.top_css}`  **Bottom:** `{descriptor.bottom_css}`")
        if descriptor.fallback:
            info += "  \n*Render failed, showing fallback gradient.*"
        return gradient_image(descriptor, width=256, height=512), info, descriptor.gradient

    with gr.Blocks(title="Sky Gradient") as demo:
        gr.Markdown("# Sky Gradient")
        gr.Markdown("Single-scattering sky colour for any place and time, as a CSS gradient.")

        with gr.Row():
            with gr.Column(scale=1):
                with gr.Group():
                    gr.Markdown("### 📍 Location")
                    lat_slider = gr.Slider(minimum=-90, maximum=90, value=constants.DEFAULT_LATITUDE, step=0.01, label="Latitude")
                    lon_slider = gr.Slider(minimum=-180, maximum=180, value=constants.DEFAULT_LONGITUDE, step=0.01, label="Longitude")
                with gr.Group():
                    gr.Markdown("### ☀️ Time")
                    day_slider = gr.Slider(minimum=1, maximum=365, value=172, step=1, label="Day of Year")
                    hour_slider = gr.Slider(minimum=0, maximum=24, value=12, step=0.1, label="Hour (UTC)")
                    samples_slider = gr.Slider(minimum=8, maximum=64, value=constants.DEFAULT_SAMPLES, step=1,
                                               label="Samples", info="Stops and march steps per ray")
                    reset_btn = gr.Button("🔄 Reset", variant="secondary")

            with gr.Column(scale=1):
                output_img = gr.Image(label="Sky", interactive=False, elem_id="sky_img")
                info_md = gr.Markdown()
                css_box = gr.Textbox(label="CSS", lines=4)

        inputs = [lat_slider, lon_slider, day_slider, hour_slider, samples_slider]
        outputs = [output_img, info_md, css_box]

        def reset_view():
            return [constants.DEFAULT_LATITUDE, constants.DEFAULT_LONGITUDE, 172, 12, constants.DEFAULT_SAMPLES]

        reset_btn.click(fn=reset_view, outputs=inputs)

        for input_comp in inputs:
            input_comp.change(fn=render_frame, inputs=inputs, outputs=outputs,
                              trigger_mode="always_last", show_progress="hidden")

        demo.load(fn=render_frame, inputs=inputs, outputs=outputs, show_progress="hidden")

    return demo


if __name__ == "__main__":
    create_ui().launch(css=CSS)
