import sys
import os
import argparse
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap

proj_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
src_path = os.path.join(proj_root, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)
from yee2d import Engine, SimulationConfig, FieldDivergenceError
from yee2d.scenes import SCENES, continuous_wave, gaussian_pulse


def build_palette():
    # 0 = obstacle (black), 1..127 vacuum (blue-white-red), 129..255 medium (green tint)
    base = plt.get_cmap('RdBu_r')(np.linspace(0.0, 1.0, 127))
    medium = base.copy()
    medium[:, 1] = np.clip(medium[:, 1] * 0.6 + 0.4, 0.0, 1.0)
    colors = np.vstack([[0.0, 0.0, 0.0, 1.0], base, [[1.0, 1.0, 1.0, 1.0]], medium])
    return ListedColormap(colors)


def frame_to_rgb(frame, palette):
    # integer input indexes the lookup table directly
    return (palette(frame.astype(np.int64))[..., :3] * 255).astype(np.uint8)


parser = argparse.ArgumentParser(description="Run a 2D TMz FDTD scene and save the encoded frame")
parser.add_argument('--scene', type=str, choices=sorted(SCENES), default='fiber')
parser.add_argument('--width', type=int, default=256)
parser.add_argument('--height', type=int, default=128)
parser.add_argument('--steps', type=int, default=400)
parser.add_argument('--dt', type=float, default=1.0)
parser.add_argument('--time-scale', type=float, default=0.2)
parser.add_argument('--courant', type=float, default=0.5)
parser.add_argument('--source', type=str, choices=['cw', 'gauss'], default='cw')
parser.add_argument('--src-amp', type=float, default=1.0)
parser.add_argument('--src-freq', type=float, default=0.25, help='cycles per unit of engine clock')
parser.add_argument('--src-ramp', type=float, default=4.0)
parser.add_argument('--guard', action='store_true', help='Stop when fields diverge')
parser.add_argument('--quiver', type=int, default=0, help='Overlay H vectors every N cells (0 = off)')
parser.add_argument('--out', type=str, default='frame.png')
parser.add_argument('--gif', action='store_true', help='Export an animation GIF of encoded frames')
parser.add_argument('--gif-path', type=str, default='frames.gif')
parser.add_argument('--gif-every', type=int, default=4)
parser.add_argument('--gif-fps', type=int, default=20)
args = parser.parse_args()

config = SimulationConfig(courant_number=args.courant, time_scale=args.time_scale,
                          divergence_guard=args.guard)
engine = Engine.with_size(args.width, args.height, config)
sx, sy = SCENES[args.scene](engine)
print(f"scene={args.scene} grid={args.width}x{args.height} k={config.k:.3f} source=({sx},{sy})")

palette = build_palette()
gif_frames = []
for n in range(args.steps):
    t = engine.clock
    if args.source == 'cw':
        value = continuous_wave(t, args.src_freq, args.src_amp, args.src_ramp)
    else:
        value = gaussian_pulse(t, t0=6.0, spread=2.0, amplitude=args.src_amp)
    engine.add_source(sx, sy, value)
    engine.step(args.dt)
    if args.guard:
        try:
            engine.check_divergence(raise_on_error=True)
        except FieldDivergenceError as exc:
            print(f"break at step {n}: {exc}")
            break
    if n % max(1, args.steps // 10) == 0:
        ez = engine.fields.stats()['Ez']
        print(f"step {n}: t={engine.clock:.2f} min={ez['min']:.3e} max={ez['max']:.3e} nonzero={ez['nonzero']}")
    if args.gif and n % max(1, args.gif_every) == 0:
        gif_frames.append(frame_to_rgb(engine.encoder.encode_array(), palette))

frame = engine.encoder.encode_array()
fig, ax = plt.subplots(figsize=(8, 8 * args.height / args.width))
ax.imshow(frame, cmap=palette, vmin=0, vmax=255, interpolation='nearest')
if args.quiver > 0:
    hx_c, hy_c = engine.fields.centered_h(stride=args.quiver)
    ys, xs = np.mgrid[1:args.height - 1:args.quiver, 1:args.width - 1:args.quiver]
    ax.quiver(xs, ys, hx_c.numpy(), hy_c.numpy(), color='k', scale=None)
ax.set_title(f"{args.scene}, t = {engine.clock:.2f}")
ax.axis('off')
out_png = args.out if os.path.isabs(args.out) else os.path.join(proj_root, args.out)
fig.savefig(out_png, dpi=150, bbox_inches='tight')
plt.close(fig)
print(f"Saved {out_png}")

if args.gif and gif_frames:
    from PIL import Image
    pil_frames = [Image.fromarray(f).convert('P', palette=Image.ADAPTIVE) for f in gif_frames]
    out_gif = args.gif_path if os.path.isabs(args.gif_path) else os.path.join(proj_root, args.gif_path)
    pil_frames[0].save(out_gif, save_all=True, append_images=pil_frames[1:],
                       duration=int(1000 / max(1, args.gif_fps)), loop=0, disposal=2)
    print(f"Saved GIF to {out_gif} ({len(pil_frames)} frames)")
