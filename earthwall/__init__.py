"""
earthwall - set the desktop wallpaper to a current satellite image of Earth

Downloads the latest full disk image, centers it on a black canvas sized for the screen and hands the
result to the operating system as the desktop background. Meant to be started by a scheduler.
"""
